from aiohttp import web

from TileLive.config import Server


def cors_middleware_factory(origin: str = Server.CORS_ORIGIN):
    @web.middleware
    async def cors_middleware(request, handler):
        if request.method == "OPTIONS":
            response = web.Response(status=200)
        else:
            response = await handler(request)

        # websocket headers are already on the wire
        if response.prepared:
            return response

        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "*"
        return response

    return cors_middleware
