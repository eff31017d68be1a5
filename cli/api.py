"""HTTP helper shared by the CLI commands."""

import httpx

from .config import API_URL, REQUEST_TIMEOUT, delete_token, load_token


def call_api(method: str, path: str, action: str, auth: bool = True, **kwargs):
    """Send a request to the API and print a friendly error on failure.

    Returns the decoded JSON body ({} for empty responses), or None after
    printing an error. ``action`` names what was attempted, for messages.
    """
    headers = {}
    if auth:
        token = load_token()
        if not token:
            print(f"Error: You must be logged in to {action}. Use /register or /login.\n")
            return None
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = httpx.request(
            method, f"{API_URL}{path}", headers=headers, timeout=REQUEST_TIMEOUT, **kwargs
        )
        response.raise_for_status()
    except httpx.ConnectError:
        print("Error: Could not connect to API server.")
        print("Please start the server with: python -m api.server\n")
        return None
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        if status_code == 401 and auth:
            print("Error: Authentication failed. Please /login again.\n")
            delete_token()
        elif status_code == 403:
            print("Error: Your account has been disabled.\n")
            delete_token()
        elif status_code == 404:
            print("Error: Note not found.\n")
        else:
            try:
                detail = e.response.json().get("detail", "Unknown error")
            except ValueError:
                detail = e.response.text or "Unknown error"
            print(f"Error: Failed to {action}: {detail}\n")
        return None
    except httpx.HTTPError as e:
        print(f"Error: API request failed: {e}\n")
        return None

    if response.status_code == 204 or not response.content:
        return {}
    return response.json()
