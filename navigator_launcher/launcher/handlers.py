"""
Routes of the unlock-prompt listener.

    GET  /unlock  password form
    POST /unlock  submit the ``password`` form field
    GET  /*       locked index page, or the starting page once unlocked
"""
from aiohttp import web

from . import views
from .state import LauncherStateMachine, UnlockOutcome

MACHINE_KEY = web.AppKey("launcher_machine", LauncherStateMachine)
HEALTH_CHECK_KEY = web.AppKey("launcher_health_check_url", str)


def _html(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


async def index(request: web.Request) -> web.Response:
    machine = request.app[MACHINE_KEY]
    if not machine.is_unlocked:
        return _html(views.index_page())
    return _html(views.starting_page(request.app[HEALTH_CHECK_KEY]))


async def unlock_form(request: web.Request) -> web.Response:
    return _html(views.unlock_page())


async def unlock(request: web.Request) -> web.Response:
    machine = request.app[MACHINE_KEY]
    health_check_url = request.app[HEALTH_CHECK_KEY]
    if not machine.is_locked:
        return _html(views.starting_page(health_check_url))
    form = await request.post()
    password = form.get("password")
    if not isinstance(password, str):
        password = None
    outcome = await machine.attempt_unlock(password)
    if outcome is UnlockOutcome.STARTING:
        return _html(views.starting_page(health_check_url))
    if outcome is UnlockOutcome.WRONG_PASSWORD:
        return _html(views.wrong_password_page(), status=401)
    if outcome is UnlockOutcome.ERROR:
        return web.Response(text="An unexpected Error occurred.", status=500)
    return _html(views.unlock_page())


def create_app(
    machine: LauncherStateMachine,
    health_check_url: str = "",
) -> web.Application:
    app = web.Application()
    app[MACHINE_KEY] = machine
    app[HEALTH_CHECK_KEY] = str(health_check_url or "")
    app.router.add_get("/unlock", unlock_form)
    app.router.add_post("/unlock", unlock)
    app.router.add_get("/{tail:.*}", index)
    return app
