"""Client for a remote bookmark service speaking JSON over HTTP."""

import asyncio
from typing import Any

import requests

from bookmark_reorder.config import API_TOKEN_FILES, resolve_api_url
from bookmark_reorder.logging_config import component_logger
from bookmark_reorder.models.node import MoveDestination, MoveResult, Node, NodeKind


def node_from_json(raw: dict[str, Any]) -> Node:
    """Build a Node from the service's wire form (browser-API field names)."""
    is_folder = raw.get("type") == "folder" or "url" not in raw
    return Node(
        id=str(raw["id"]),
        parent_id=str(raw["parentId"]) if raw.get("parentId") is not None else None,
        kind=NodeKind.CONTAINER if is_folder else NodeKind.ITEM,
        index=int(raw.get("index", 0)),
        title=raw.get("title", ""),
        url=None if is_folder else raw.get("url"),
    )


class RemoteStore:
    """Ordered store backed by the remote bookmark service."""

    def __init__(self, base_url: str | None = None, *, token: str | None = None) -> None:
        self.base_url = (base_url or resolve_api_url()).rstrip("/")
        self.sess = requests.Session()
        self.logger = component_logger("api")

        token_name: str | None = "argument" if token else None
        if token is None:
            for token_path in API_TOKEN_FILES:
                try:
                    token = token_path.read_text(encoding="utf-8").strip()
                    token_name = str(token_path)
                    break
                except FileNotFoundError:
                    pass
            else:
                msg = f"Cannot find bookmark service token file, was looking at {API_TOKEN_FILES!r}"
                raise RuntimeError(msg)
        self.api_token = token

        self.logger.debug("API ready: {} with token from {!r}", self.base_url, token_name)

    def call(self, path: str, args: dict[str, Any]) -> dict[str, Any]:
        """Invoke a service endpoint, return json."""
        self.logger.debug("Making request: {!r} {}", path, repr(args)[:32])
        r = self.sess.post(f"{self.base_url}/{path}", json={"token": self.api_token, **args})
        r.raise_for_status()
        rv: dict[str, Any] = r.json()
        if rv.get("_code") != "Ok" or rv.get("_msg"):
            code, message = rv.get("_code"), rv.get("_msg")
            msg = f"API call failed: ({path!r}, {args!r}) -> ({code!r}, {message!r})"
            raise RuntimeError(msg)
        return rv

    def get_tree(self) -> list[Node]:
        rv = self.call("bookmarks/tree", {})
        return [node_from_json(raw) for raw in rv["nodes"]]

    async def move(self, node_id: str, destination: MoveDestination) -> MoveResult:
        rv = await asyncio.to_thread(
            self.call,
            "bookmarks/move",
            {"id": node_id, "parentId": destination.parent_id, "index": destination.index},
        )
        moved = rv["bookmark"]
        return MoveResult(
            node_id=str(moved["id"]),
            final_parent_id=str(moved["parentId"]),
            final_index=int(moved["index"]),
        )

    def create(
        self,
        parent_id: str,
        title: str,
        *,
        url: str | None = None,
        index: int | None = None,
    ) -> Node:
        args: dict[str, Any] = {"parentId": parent_id, "title": title}
        if url is not None:
            args["url"] = url
        if index is not None:
            args["index"] = index
        return node_from_json(self.call("bookmarks/create", args)["bookmark"])

    def remove(self, node_id: str) -> None:
        self.call("bookmarks/remove", {"id": node_id})
