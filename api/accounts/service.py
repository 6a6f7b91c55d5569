"""
Account deletion cascade.

States run strictly in order:
1) COLLECT_CANDIDATES: file ids the account may leave behind (pre-mutation)
2) NULLIFY_BLOCKING_REFERENCES: clear columns elsewhere that point at it
3) DELETE_ENTITY: remove owned rows, then the account
4) SWEEP: delete the candidates nothing references any more
5) DONE

Steps 2 and the owned-row part of 3 skip collections or fields this
deployment does not have. Failing to delete the account row itself stops the
cascade before the sweep.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Awaitable

from fastapi import HTTPException, status

from assets import collectors, sweeper
from core.cache import CachePort
from core.directus import DirectusError, DirectusSoftError

from . import repository

logger = logging.getLogger(__name__)


class CascadeState(str, enum.Enum):
    COLLECT_CANDIDATES = "collect_candidates"
    NULLIFY_BLOCKING_REFERENCES = "nullify_blocking_references"
    DELETE_ENTITY = "delete_entity"
    SWEEP = "sweep"
    DONE = "done"


@dataclass
class AccountDeletionResult:
    user_id: str
    state: CascadeState = CascadeState.COLLECT_CANDIDATES
    candidates: set[str] = field(default_factory=set)
    nullified: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    deleted_files: list[str] = field(default_factory=list)

    def advance(self, state: CascadeState) -> None:
        logger.info("account_cascade user_id=%s state=%s", self.user_id, state.value)
        self.state = state


async def _soft_step(result: AccountDeletionResult, label: str, step: Awaitable[None]) -> bool:
    try:
        await step
    except DirectusSoftError as exc:
        logger.warning("account_cascade_skipped user_id=%s step=%s reason=%s", result.user_id, label, exc)
        result.skipped.append(label)
        return False
    return True


async def _nullify_blocking_references(result: AccountDeletionResult) -> None:
    user_id = result.user_id
    await _soft_step(
        result,
        "app_user_registration_requests.avatar_file",
        repository.clear_registration_avatars(user_id),
    )
    for collection, column in repository.BLOCKING_REFERENCES:
        label = f"{collection}.{column}"
        if await _soft_step(result, label, repository.nullify_reference(collection, column, user_id)):
            result.nullified.append(label)


async def _delete_owned_rows(result: AccountDeletionResult) -> None:
    user_id = result.user_id
    for child_collection, parent_field, parent_collection in repository.OWNED_CHILDREN:
        try:
            parent_ids = await repository.owned_ids(parent_collection, "author_id", user_id)
        except DirectusSoftError as exc:
            logger.warning("account_cascade_skipped user_id=%s step=%s reason=%s", user_id, parent_collection, exc)
            result.skipped.append(child_collection)
            continue
        if parent_ids:
            await _soft_step(
                result,
                child_collection,
                repository.delete_where(child_collection, {parent_field: {"_in": parent_ids}}),
            )

    for collection, owner_field in repository.OWNED_ROWS:
        await _soft_step(
            result,
            collection,
            repository.delete_where(collection, {owner_field: {"_eq": user_id}}),
        )


async def delete_account(user_id: str, *, actor_id: str, cache: CachePort) -> AccountDeletionResult:
    user_id = (user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Account id is required.")
    if user_id == actor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account.",
        )

    try:
        account = await repository.get_account(user_id)
    except DirectusError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not read account.") from exc
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found.")

    result = AccountDeletionResult(user_id=user_id)
    result.advance(CascadeState.COLLECT_CANDIDATES)
    result.candidates = await collectors.collect_account_file_ids(user_id)

    try:
        result.advance(CascadeState.NULLIFY_BLOCKING_REFERENCES)
        await _nullify_blocking_references(result)

        result.advance(CascadeState.DELETE_ENTITY)
        await _delete_owned_rows(result)
        await repository.delete_account(user_id)
    except DirectusError as exc:
        logger.error("account_cascade_failed user_id=%s state=%s error=%s", user_id, result.state.value, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Account deletion failed during {result.state.value}.",
        ) from exc

    result.advance(CascadeState.SWEEP)
    result.deleted_files = await sweeper.sweep_file_ids(result.candidates)
    cache.invalidate("author", user_id)

    result.advance(CascadeState.DONE)
    return result
