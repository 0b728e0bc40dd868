from typing import TypedDict


class ChatMessageDict(TypedDict):
    """Single chat message payload."""

    role: str
    content: str


class ProviderProfileDict(TypedDict, total=False):
    """YAML shape of one entry under `providers`."""

    api_key: str
    base_url: str
    model: str
