"""
Script to create an Admin account
Admins cannot self-register through the API; run this to create the first one
"""

import sys
import asyncio
import getpass
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from pydantic import ValidationError

from app.auth import Role
from app.config import settings
from app.container import build_container
from app.errors import CampusError
from app.logging_config import setup_logging
from app.schemas.user import RegisterRequest


async def create_admin(data: RegisterRequest) -> None:
    container = build_container(settings)
    await container.startup()
    try:
        user, _ = await container.users.register(data, allow_admin=True)
        print("Admin created successfully")
        print(f"   Id: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Name: {user.full_name}")
    except CampusError as e:
        print(f"Error creating admin: {e.message}")
    finally:
        await container.shutdown()


async def main():
    print("\n" + "=" * 60)
    print("CREATE ADMIN")
    print("=" * 60 + "\n")

    email = input("Enter email: ").strip()
    first_name = input("Enter first name: ").strip()
    last_name = input("Enter last name: ").strip()
    employee_id = input("Enter employee id: ").strip()
    department = input("Enter department: ").strip()

    password = getpass.getpass("Enter password: ")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        print("Passwords do not match!")
        return

    try:
        data = RegisterRequest(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=Role.ADMIN,
            department=department,
            employee_id=employee_id,
        )
    except ValidationError as e:
        print(f"Invalid input: {e}")
        return

    print()
    await create_admin(data)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
