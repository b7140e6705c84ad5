"""Client-side errors."""

import httpx


class ChatClientError(Exception):
    """A request failed; `message` is safe to show to the user."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def raise_for_status(response: httpx.Response) -> None:
    """Raise ChatClientError carrying the server's message, if it sent one."""
    if response.is_success:
        return

    message = f"API responded with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = body["message"]
    raise ChatClientError(message, status_code=response.status_code)
