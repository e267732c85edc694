import asyncio
import logging
import os
import sys
from collections import defaultdict

import orjson

from swayfocus.errors import DispatchError, RetrievalError
from swayfocus.swaytypes.tree import Tree

log = logging.getLogger(__name__)

JSONValue = (
    bool
    | str
    | None
    | float
    | dict[str, "JSONInnerValue"]
    | list[dict[str, "JSONInnerValue"]]
)
JSONInnerValue = JSONValue | list[dict[str, JSONValue]]
JSONDict = dict[str, JSONValue]
JSONList = list[JSONDict]

magic_string = "i3-ipc"
magic_len = len(magic_string)
magic_enc = magic_string.encode()
payload_len_len = 4  # length of payload length
payload_type_len = 4  # length of payload type
header_len = magic_len + payload_len_len + payload_type_len

RUN_COMMAND = 0
GET_TREE = 4


def socket_path() -> str:
    for variable in ["SWAYSOCK", "I3SOCK"]:
        if path := os.environ.get(variable):
            return path
    raise EnvironmentError("Could not find the socket, SWAYSOCK and I3SOCK are unset")


class SwayIPCSocket:
    def __init__(self):
        self.lock = asyncio.Lock()
        self.reader: asyncio.StreamReader = None  # pyright: ignore
        self.writer: asyncio.StreamWriter = None  # pyright: ignore

    async def connect(self):
        path = socket_path()
        log.debug("Connecting to %s", path)
        self.reader, self.writer = await asyncio.open_unix_connection(path=path)

    async def send(self, payload_type: int, command=b""):
        if not self.writer:  # first time calling, create socket
            await self.connect()

        payload_length = len(command)

        data = magic_enc
        data += payload_length.to_bytes(payload_len_len, sys.byteorder)
        data += payload_type.to_bytes(payload_type_len, sys.byteorder)
        data += command

        self.writer.write(data)
        await self.writer.drain()

    async def receive(self) -> JSONDict | JSONList:
        header = await self.reader.readexactly(header_len)
        if header[:magic_len] != magic_enc:
            raise ConnectionError(f"Unexpected reply header {header!r}")
        payload_length_bytes = header[magic_len : magic_len + payload_len_len]
        payload_length = int.from_bytes(payload_length_bytes, sys.byteorder)

        raw_response = await self.reader.readexactly(payload_length)
        return orjson.loads(raw_response)

    async def close(self):
        if self.writer and not self.writer.is_closing():
            self.writer.close()
            await self.writer.wait_closed()

    async def send_receive(self, payload_type: int, command=b"") -> JSONDict | JSONList:
        async with self.lock:  # ensure only one coroutine is in this block at a time
            await self.send(payload_type, command)
            return await self.receive()


class SwayIPCConnection:
    def __init__(self) -> None:
        self.sockets = defaultdict(lambda: SwayIPCSocket())

    async def run_command(self, c: str) -> list[dict[str, bool | str]]:
        """Runs `c`, raising DispatchError unless every command succeeded"""
        try:
            replies = await self.sockets["run_command"].send_receive(
                RUN_COMMAND, c.encode()
            )
        except (OSError, EOFError, orjson.JSONDecodeError) as e:
            raise DispatchError(f"Could not run {c!r}: {e}") from e

        if not isinstance(replies, list):
            raise DispatchError(f"Unexpected reply to {c!r}: {replies!r}")
        for reply in replies:
            if not isinstance(reply, dict):
                raise DispatchError(f"Unexpected reply to {c!r}: {reply!r}")
            if not reply.get("success"):
                raise DispatchError(f"{c!r} failed: {reply.get('error', 'unknown')}")
        return replies  # pyright: ignore

    async def get_tree(self) -> Tree:
        try:
            tree = await self.sockets["get_tree"].send_receive(GET_TREE)
        except (OSError, EOFError, orjson.JSONDecodeError) as e:
            raise RetrievalError(f"Could not retrieve the tree: {e}") from e

        if not isinstance(tree, dict):
            raise RetrievalError(f"Unexpected reply to get_tree: {type(tree).__name__}")
        return tree  # pyright: ignore

    async def close(self):
        while self.sockets:
            _, socket = self.sockets.popitem()
            await socket.close()
