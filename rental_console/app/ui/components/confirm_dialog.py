from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable

Confirmer = Callable[[str], Awaitable[bool] | bool]


async def ask(confirm: Confirmer | None, message: str) -> bool:
    """Resolves a sync or async ok/cancel prompt. No confirmer means cancel."""
    if confirm is None:
        return False
    answer = confirm(message)
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


def terminal_confirmer(message: str) -> bool:
    answer = input(f"{message} [y/N]: ").strip().lower()
    return answer in {"y", "yes"}
