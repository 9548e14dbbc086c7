from __future__ import annotations

from dataclasses import dataclass

from clients.rental_api_sdk.normalizers import compute_total_pages


@dataclass
class PaginationState:
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0


def next_page(state: PaginationState) -> PaginationState:
    if state.total_pages and state.page >= state.total_pages:
        return state
    state.page += 1
    return state


def prev_page(state: PaginationState) -> PaginationState:
    state.page = max(1, state.page - 1)
    return state


def goto_page(state: PaginationState, page: int) -> PaginationState:
    upper = state.total_pages if state.total_pages > 0 else page
    state.page = max(1, min(page, upper))
    return state


def set_limit(state: PaginationState, limit: int) -> PaginationState:
    state.limit = max(1, limit)
    state.page = 1
    return state


def apply_totals(state: PaginationState, total: int) -> PaginationState:
    state.total = max(0, total)
    state.total_pages = compute_total_pages(state.total, state.limit)
    return state


def clamp_page(state: PaginationState) -> bool:
    """Pulls an overflowing page back into range. Returns True when the page moved."""
    target = state.total_pages if state.total_pages > 0 else 1
    if state.page <= target:
        return False
    state.page = target
    return True
