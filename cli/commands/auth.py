"""Authentication command handlers."""

from getpass import getpass

from ..api import call_api
from ..config import delete_token, save_token


def register_user():
    """Handle user registration and auto-login."""
    print("\n=== User Registration ===")
    email = input("Email: ").strip()
    name = input("Name (optional): ").strip()
    password = getpass("Password: ")

    if not email or not password:
        print("Error: Email and password are required.\n")
        return

    data = call_api(
        "POST",
        "/auth/register",
        "register",
        auth=False,
        json={"email": email, "password": password, "name": name or None},
    )
    if data is None:
        return

    save_token(data["access_token"])

    user = data["user"]
    print("\n✓ Registration successful! You are now logged in.")
    print(f"  User ID: {user['id']}")
    print(f"  Email: {user['email']}\n")


def login_user():
    """Handle user login."""
    print("\n=== User Login ===")
    email = input("Email: ").strip()
    password = getpass("Password: ")

    if not email or not password:
        print("Error: Email and password are required.\n")
        return

    data = call_api(
        "POST", "/auth/login", "log in", auth=False, json={"email": email, "password": password}
    )
    if data is None:
        return

    save_token(data["access_token"])

    user = data["user"]
    print("\n✓ Login successful!")
    print(f"  Welcome back, {user.get('name') or user['email']}!\n")


def logout_user():
    """Handle user logout."""
    delete_token()
    print("\n✓ Logged out successfully.\n")


def whoami():
    """Show the logged-in user."""
    user = call_api("GET", "/auth/me", "look up your account")
    if user is None:
        return
    print(f"\n{user.get('name') or '(no name)'} <{user['email']}>  id={user['id']}\n")
