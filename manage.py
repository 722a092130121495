from typing import Annotated

from rich import print
import typer
import uvicorn

from app.apps.price_api.services.api_key import generate_api_key
from app.core.config import settings
from app.core.enums import Tier

app = typer.Typer()


@app.command()
def runserver(
    host: Annotated[
        str, typer.Option("--host", "-h", help="Interface to bind.")
    ] = settings.HOST,
    port: Annotated[int, typer.Option("--port", "-p", help="Port to bind.")] = settings.PORT,
    reload: Annotated[
        bool, typer.Option("--reload", help="Restart on code changes.")
    ] = False,
):
    """
    Start the Crypto Price API with uvicorn.
    """
    print(f"[green]Starting {settings.APP_NAME} on {host}:{port}[/green]")
    print(f"[cyan]Payment address:[/cyan] {settings.PAYMENT_ADDRESS}")
    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


@app.command()
def generatekey(
    tier: Annotated[
        Tier, typer.Option("--tier", "-t", help="Tier encoded in the key prefix.")
    ] = Tier.FREE,
):
    """
    Generate a test API key without a running server.

    Keys are trusted by prefix, so an offline key works against any
    instance that does not require registered keys.
    """
    key = generate_api_key(tier)
    print(f"[green]{tier.value} API key:[/green] {key}")
    if settings.API_KEY_REQUIRE_REGISTERED:
        print(
            "[yellow]API_KEY_REQUIRE_REGISTERED is on; servers will reject "
            "keys not issued through /generate-key.[/yellow]"
        )


if __name__ == "__main__":
    app()
