"""Example: keep a small aiohttp service locked until its vault is unlocked.

Run it, note the password printed on first start, then open
http://localhost:3000/unlock and submit it.
"""
import asyncio
import logging

from aiohttp import web

from navigator_launcher import (
    SecretDefinition,
    announce_password,
    create_launcher,
    generate_password,
    generate_token,
)

PORT = 3000


async def run_service(secrets) -> None:
    """The protected service; it reuses the port of the unlock prompt."""
    async def health(request: web.Request) -> web.Response:
        return web.json_response({"status": "OK"})

    async def unlock(request: web.Request) -> web.Response:
        return web.Response(
            text=(
                "This is an example application! "
                f"It started with the secrets: {', '.join(secrets)}"
            )
        )

    app = web.Application()
    app.router.add_get("/health", health)
    app.router.add_get("/unlock", unlock)
    runner = web.AppRunner(app)
    await runner.setup()
    await web.TCPSite(runner, "0.0.0.0", PORT).start()
    print("Starting main service ...")


async def main() -> None:
    launcher = await create_launcher(
        [SecretDefinition(key="DATABASE_KEY", generator=generate_token)],
        "database-secrets.txt",
        PORT,
        announce_password(generate_password),
        on_complete=run_service,
        health_check_url=f"http://localhost:{PORT}/health",
    )
    await launcher.wait_closed()
    # keep serving the protected service
    await asyncio.Event().wait()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
