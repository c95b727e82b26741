"""从 app.state 取出 lifespan 装配好的 ApiContainer"""

from fastapi import Request

from pipestation.interfaces.api.container import ApiContainer


def get_container(request: Request) -> ApiContainer:
    container: ApiContainer | None = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("ApiContainer missing from app.state; start the app via its lifespan")
    return container
