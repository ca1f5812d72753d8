from aiohttp import web

from TileLive.context import ServerContext
from TileLive.helpers.catalog import StreamCatalog
from TileLive.helpers.supervisor import StreamSupervisor
from TileLive.helpers.sync import SyncHub

CONTEXT = web.AppKey("context", ServerContext)
CATALOG = web.AppKey("catalog", StreamCatalog)
HUB = web.AppKey("hub", SyncHub)
SUPERVISOR = web.AppKey("supervisor", StreamSupervisor)
