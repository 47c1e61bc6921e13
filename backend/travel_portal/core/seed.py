"""Seed default roles and permissions into the database."""
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.db.session import AsyncSessionLocal
from travel_portal.models.user import SYSTEM_ADMIN_ROLE, Permission, Role
from travel_portal.services.modules import MODULES, VIEW_REPORTS

logger = logging.getLogger(__name__)


def _approve(*modules: str) -> list[str]:
    return [MODULES[m].approve_permission for m in modules] + [MODULES[m].view_all_permission for m in modules]


ALL_MODULES = tuple(MODULES)

# role -> permissions granted on top of submitting own requests
DEFAULT_ROLES: dict[str, list[str]] = {
    "Requestor": [],
    "Department Focal": _approve(*ALL_MODULES),
    "Line Manager": _approve(*ALL_MODULES),
    "HOD": _approve(*ALL_MODULES) + [VIEW_REPORTS],
    "Ticketing Admin": [MODULES["trf"].process_permission, MODULES["trf"].view_all_permission],
    "Claims Admin": [MODULES["claims"].process_permission, MODULES["claims"].view_all_permission, VIEW_REPORTS],
    "Visa Admin": [MODULES["visa"].process_permission, MODULES["visa"].view_all_permission],
    "Transport Admin": [MODULES["transport"].process_permission, MODULES["transport"].view_all_permission],
    "Accommodation Admin": [
        MODULES["accommodation"].process_permission,
        MODULES["accommodation"].view_all_permission,
    ],
    SYSTEM_ADMIN_ROLE: [],
}


def all_permission_names() -> list[str]:
    names = {VIEW_REPORTS}
    for config in MODULES.values():
        names |= {config.approve_permission, config.process_permission, config.view_all_permission}
    return sorted(names)


async def seed_roles(db: AsyncSession) -> dict[str, Role]:
    """Insert missing permissions and roles; existing rows are left as they are."""
    permissions: dict[str, Permission] = {}
    for name in all_permission_names():
        existing = (await db.execute(select(Permission).where(Permission.name == name))).scalars().first()
        if existing is None:
            existing = Permission(name=name)
            db.add(existing)
            logger.info("Seeded permission: %s", name)
        permissions[name] = existing

    roles: dict[str, Role] = {}
    for role_name, granted in DEFAULT_ROLES.items():
        role = (await db.execute(select(Role).where(Role.name == role_name))).scalars().first()
        if role is None:
            role = Role(name=role_name, permissions=[permissions[p] for p in granted])
            db.add(role)
            logger.info("Seeded role: %s (%d permissions)", role_name, len(granted))
        else:
            logger.info("Role already exists: %s, skipping", role_name)
        roles[role_name] = role

    await db.commit()
    return roles


async def run_seed() -> None:
    async with AsyncSessionLocal() as db:
        await seed_roles(db)
    logger.info("Seeding complete.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run_seed())
