# flake8: noqa
# scripts/create_admin.py

import asyncio
import typer

from app.core.database import AsyncSessionLocal, create_db_and_tables, engine
from app.core.storage import DatabaseStorage
from app.domains.usr import schemas as usr_schemas
from app.domains.usr.models import UserRole

cli = typer.Typer()


async def create_admin_user(user_in: usr_schemas.UserCreate) -> bool:
    """
    Create the account in the configured database. Returns False when the
    username is already taken.
    """
    await create_db_and_tables()
    try:
        async with AsyncSessionLocal() as db:
            storage = DatabaseStorage(db)
            if await storage.get_user_by_username(user_in.username):
                typer.echo(f"Error: username already exists: {user_in.username}")
                return False
            await storage.create_user(user_in)
    finally:
        await engine.dispose()
    typer.echo(f"Account created: {user_in.username} ({user_in.role.value})")
    return True


@cli.command()
def main(
    username: str = typer.Option(
        ..., '--username', '-u',
        prompt="Username",
        help="Login name of the new account."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="Password",
        hide_input=True,
        confirmation_prompt=True,
        help="Password of the new account (at least 6 characters)."
    ),
    full_name: str = typer.Option(
        "System Administrator", '--name', '-n',
        help="Full name shown in the user list."
    ),
    role: UserRole = typer.Option(
        UserRole.ADMIN, '--role', '-r',
        help="admin or manager."
    ),
):
    """
    Create an admin or manager account for the equipment tracker.
    """
    if len(password) < 6:
        typer.echo("Error: the password must be at least 6 characters long.")
        raise typer.Abort()
    if role == UserRole.USER:
        typer.echo("Error: use the API to create department users.")
        raise typer.Abort()

    user_data = usr_schemas.UserCreate(
        username=username,
        password=password,
        full_name=full_name,
        role=role,
    )
    if not asyncio.run(create_admin_user(user_data)):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
