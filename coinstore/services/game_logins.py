"""Stored game back-office logins. Passwords are kept Fernet-encrypted."""

from beanie import PydanticObjectId

from coinstore.core.encryption import decrypt_secret, encrypt_secret
from coinstore.core.exceptions import NotFoundError
from coinstore.models.game_login import GameLogin


def game_login_to_dict(g: GameLogin) -> dict:
    return {
        "id": str(g.id),
        "owner_type": g.owner_type,
        "game_name": g.game_name,
        "login_username": g.login_username,
        "password": decrypt_secret(g.password_encrypted),
        "game_link": g.game_link,
        "created_at": g.created_at.isoformat(),
    }


async def list_game_logins(owner_type: str | None = None) -> list[GameLogin]:
    query = {"owner_type": owner_type} if owner_type in ("admin", "user") else {}
    return await GameLogin.find(query).sort(-GameLogin.created_at).to_list()


async def create_game_login(
    owner_type: str,
    game_name: str,
    login_username: str,
    password: str,
    game_link: str | None = None,
) -> GameLogin:
    g = GameLogin(
        owner_type=owner_type,
        game_name=game_name.strip(),
        login_username=login_username.strip(),
        password_encrypted=encrypt_secret(password),
        game_link=(game_link or "").strip() or None,
    )
    await g.insert()
    return g


async def delete_game_login(login_id: PydanticObjectId) -> None:
    g = await GameLogin.get(login_id)
    if not g:
        raise NotFoundError("Game login not found")
    await g.delete()
