"""Summarize-README use case — short natural-language blurb per repository.

Resolves the default branch, locates ``README.md`` by walking an ordered list
of candidate branches, and asks the LLM gateway for a three-line summary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from publiccode_directory.domain.entities import SummaryOutcome, SummaryStatus
from publiccode_directory.domain.exceptions import FetchError, LlmError, NotFoundError
from publiccode_directory.domain.ports.llm_gateway import LlmGateway
from publiccode_directory.domain.ports.repo_fetcher import RepoFetcher
from publiccode_directory.domain.value_objects import RepositoryId
from publiccode_directory.services.repo_detail_resolver import RepoDetailResolver
from publiccode_directory.services.token_budget import truncate_to_budget

logger = logging.getLogger(__name__)

NO_SUMMARY_TEXT = "No summary available."
README_PATH = "README.md"
FALLBACK_BRANCHES: tuple[str, ...] = ("main", "master")

SYSTEM_PROMPT = """\
You summarise GitHub repositories that publish a publiccode.yml file.  Given \
a README, write a summary of at most three short lines in {language}.  Cover \
the purpose of the software, its main features, and its technology stack.  \
Only state what the README supports.  Return plain text without markdown.
"""


class ReadmeLookupState(str, Enum):
    TRYING = "trying"
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReadmeLookup:
    state: ReadmeLookupState
    branch: str | None = None
    content: str = ""
    error: str | None = None


def candidate_branches(default_branch: str | None) -> list[str]:
    """Default branch first, then the conventional names, without duplicates."""
    ordered = [default_branch] if default_branch else []
    ordered.extend(FALLBACK_BRANCHES)
    return list(dict.fromkeys(ordered))


class SummarizeReadmeUseCase:
    """Produces a :class:`SummaryOutcome` for one repository."""

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        detail_resolver: RepoDetailResolver,
        llm_gateway: LlmGateway,
        *,
        language: str = "English",
        max_readme_tokens: int = 3_000,
    ) -> None:
        self._fetcher = repo_fetcher
        self._resolver = detail_resolver
        self._llm = llm_gateway
        self._language = language
        self._max_tokens = max_readme_tokens

    async def execute(self, repository_id: str) -> SummaryOutcome:
        rid = RepositoryId.from_string(repository_id)
        detail = await self._resolver.resolve(rid.full_name)
        lookup = await self.find_readme(rid, detail.default_branch if detail else None)

        if lookup.state is ReadmeLookupState.FAILED:
            return SummaryOutcome(
                repository_id=rid.full_name,
                status=SummaryStatus.ERROR,
                text=lookup.error or "README could not be fetched.",
                branch=lookup.branch,
            )

        if lookup.state is ReadmeLookupState.NOT_FOUND or not lookup.content.strip():
            return SummaryOutcome(
                repository_id=rid.full_name,
                status=SummaryStatus.UNAVAILABLE,
                text=NO_SUMMARY_TEXT,
                branch=lookup.branch,
            )

        readme = truncate_to_budget(lookup.content, self._max_tokens)
        try:
            text = await self._llm.complete(
                SYSTEM_PROMPT.format(language=self._language),
                f"Repository: {rid.full_name}\n\nREADME:\n\n{readme}",
            )
        except LlmError as exc:
            logger.warning("Summary generation failed for %s: %s", rid, exc)
            return SummaryOutcome(
                repository_id=rid.full_name,
                status=SummaryStatus.ERROR,
                text=str(exc),
                branch=lookup.branch,
            )

        return SummaryOutcome(
            repository_id=rid.full_name,
            status=SummaryStatus.READY,
            text=text,
            branch=lookup.branch,
        )

    async def find_readme(self, rid: RepositoryId, default_branch: str | None) -> ReadmeLookup:
        """Try each candidate branch in order; stop at the first hit or hard failure."""
        for branch in candidate_branches(default_branch):
            lookup = ReadmeLookup(ReadmeLookupState.TRYING, branch=branch)
            logger.debug("README lookup %s: %s on %s", lookup.state.value, rid, branch)
            try:
                content = await self._fetcher.fetch_raw_file(rid, branch, README_PATH)
            except NotFoundError:
                continue
            except FetchError as exc:
                return ReadmeLookup(ReadmeLookupState.FAILED, branch=branch, error=str(exc))
            return ReadmeLookup(ReadmeLookupState.FOUND, branch=branch, content=content)

        return ReadmeLookup(ReadmeLookupState.NOT_FOUND)
