# srcon/console.py
from __future__ import annotations

import asyncio
import contextlib
import os
from pathlib import Path
from typing import Optional

from prompt_toolkit.application import Application
from prompt_toolkit.document import Document
from prompt_toolkit.filters import has_focus
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import Label, TextArea

from .client import RconClient
from .errors import RconError

TAIL_BOOT_BYTES = 64_000  # show last ~64KB of the log on open
TAIL_POLL = 0.25          # seconds
LOG_TRIM_LIMIT = 2_000_000  # keep last ~2MB in the in-memory text area


async def run_console(client: RconClient, title: str, tail: Optional[Path] = None) -> None:
    """Fullscreen RCON console: output area, optional log follow, input bar."""
    output = TextArea(
        style="class:log",
        focusable=False,
        scrollbar=True,
        wrap_lines=False,
        read_only=False,  # programmatic inserts
    )
    input_field = TextArea(height=1, prompt="> ", multiline=False)
    status = Label(
        text=f"RCON {title}    (Ctrl-C / Esc to exit)",
        style="class:status",
    )

    kb = KeyBindings()
    # one request at a time on the session
    lock = asyncio.Lock()

    @kb.add("enter", filter=has_focus(input_field))
    async def _(event) -> None:
        cmd = (input_field.text or "").strip()
        if not cmd:
            return
        input_field.buffer.document = Document(text="")
        async with lock:
            try:
                out = await asyncio.to_thread(client.execute, cmd)
                _append(app, output, f"$ {cmd}\n{out}\n")
            except (RconError, OSError) as e:
                _append(app, output, f"[rcon error] {e}\n")

    @kb.add("c-c")
    @kb.add("escape")
    def _(event) -> None:
        event.app.exit()

    root = HSplit([status, output, input_field])
    app = Application(
        layout=Layout(root),
        key_bindings=kb,
        full_screen=True,
        style=Style.from_dict(
            {
                "log": "bg:#0e162b #d1d5db",
                "status": "reverse",
            }
        ),
    )

    tasks = []
    if tail is not None:
        tasks.append(asyncio.create_task(tail_file(tail, lambda s: _append(app, output, s))))

    try:
        await app.run_async()
    finally:
        for t in tasks:
            t.cancel()
        for t in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await t


async def tail_file(path: Path, sink) -> None:
    """Feed the last TAIL_BOOT_BYTES of path to sink, then follow appended data."""
    offset = 0
    try:
        with path.open("rb") as f:
            f.seek(0, os.SEEK_END)
            end = f.tell()
            start = max(0, end - TAIL_BOOT_BYTES)
            f.seek(start)
            if start > 0:
                f.readline()  # drop partial first line
            chunk = f.read()
            if chunk:
                sink(chunk.decode("utf-8", "ignore"))
            offset = end
    except FileNotFoundError:
        pass

    while True:
        try:
            with path.open("rb") as f:
                f.seek(0, os.SEEK_END)
                if f.tell() < offset:
                    offset = 0  # truncated or rotated
                f.seek(offset)
                data = f.read()
                if data:
                    offset = f.tell()
                    sink(data.decode("utf-8", "ignore"))
        except FileNotFoundError:
            # file may appear later
            pass
        await asyncio.sleep(TAIL_POLL)


def plain_console(client: RconClient, read=input, write=print) -> None:
    """Line-mode fallback when the fullscreen UI cannot run."""
    write("Interactive RCON. Type /quit to exit.")
    while True:
        try:
            cmd = read("> ").strip()
        except EOFError:
            break
        if cmd.lower() in ("/quit", "quit", "exit"):
            break
        if not cmd:
            continue
        try:
            write(client.execute(cmd))
        except (RconError, OSError) as e:
            write(f"[rcon error] {e}")


def _append(app: Optional[Application], area: TextArea, text: str) -> None:
    """
    Append text to the TextArea and keep the buffer size bounded.
    """
    buf = area.buffer
    buf.insert_text(text, move_cursor=True)
    if len(buf.text) > LOG_TRIM_LIMIT:
        new_text = buf.text[-LOG_TRIM_LIMIT:]
        buf.document = Document(new_text, cursor_position=len(new_text))
    if app is not None:
        app.invalidate()
