"""Unit tests for README lookup and summarisation."""

import pytest
from unittest.mock import AsyncMock, Mock

from publiccode_directory.domain.entities import SummaryStatus
from publiccode_directory.domain.exceptions import (
    InvalidRequestError,
    LlmError,
    NotFoundError,
    UpstreamError,
)
from publiccode_directory.domain.value_objects import RepositoryId
from publiccode_directory.services.summarize_readme import (
    NO_SUMMARY_TEXT,
    README_PATH,
    ReadmeLookupState,
    SummarizeReadmeUseCase,
    candidate_branches,
)
from tests.factories import make_detail


def _build(readmes: dict, default_branch: str | None = "main", llm_reply="Line one.\nLine two."):
    """Use case whose raw fetcher serves *readmes* keyed by branch (exceptions raised)."""

    async def fetch_raw_file(rid, branch, path):
        value = readmes.get(branch, NotFoundError(f"{branch} missing"))
        if isinstance(value, Exception):
            raise value
        return value

    fetcher = Mock()
    fetcher.fetch_raw_file = AsyncMock(side_effect=fetch_raw_file)

    resolver = Mock()
    detail = make_detail("acme/foo", branch=default_branch) if default_branch else None
    resolver.resolve = AsyncMock(return_value=detail)

    llm = Mock()
    if isinstance(llm_reply, Exception):
        llm.complete = AsyncMock(side_effect=llm_reply)
    else:
        llm.complete = AsyncMock(return_value=llm_reply)

    use_case = SummarizeReadmeUseCase(fetcher, resolver, llm, language="English")
    return use_case, fetcher, llm


def _branches_tried(fetcher):
    return [call.args[1] for call in fetcher.fetch_raw_file.await_args_list]


class TestCandidateBranches:

    def test_default_branch_first(self):
        assert candidate_branches("develop") == ["develop", "main", "master"]

    def test_no_duplicates(self):
        assert candidate_branches("master") == ["master", "main"]

    def test_unknown_default_uses_conventional_names(self):
        assert candidate_branches(None) == ["main", "master"]


class TestSummarizeReadme:

    @pytest.mark.asyncio
    async def test_summarises_readme_on_default_branch(self):
        use_case, fetcher, llm = _build({"develop": "# App\nDoes things."}, default_branch="develop")

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.READY
        assert outcome.text == "Line one.\nLine two."
        assert outcome.branch == "develop"
        assert _branches_tried(fetcher) == ["develop"]
        system_prompt, user_prompt = llm.complete.await_args.args
        assert "English" in system_prompt
        assert "Does things." in user_prompt

    @pytest.mark.asyncio
    async def test_falls_back_after_404(self):
        use_case, fetcher, _ = _build({"master": "# Legacy"}, default_branch="develop")

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.READY
        assert outcome.branch == "master"
        assert _branches_tried(fetcher) == ["develop", "main", "master"]

    @pytest.mark.asyncio
    async def test_missing_detail_still_tries_conventional_branches(self):
        use_case, fetcher, _ = _build({"main": "# Hi"}, default_branch=None)

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.READY
        assert _branches_tried(fetcher) == ["main"]

    @pytest.mark.asyncio
    async def test_absent_readme_yields_sentinel(self):
        use_case, _, llm = _build({})

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.UNAVAILABLE
        assert outcome.text == NO_SUMMARY_TEXT
        llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_readme_yields_sentinel(self):
        use_case, _, llm = _build({"main": "  \n"})

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.UNAVAILABLE
        assert outcome.text == NO_SUMMARY_TEXT
        llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_404_failure_stops_the_walk(self):
        use_case, fetcher, llm = _build({"main": UpstreamError("HTTP 503"), "master": "# Never"})

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.ERROR
        assert "503" in outcome.text
        assert _branches_tried(fetcher) == ["main"]
        llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_llm_failure_is_an_error_state(self):
        use_case, _, _ = _build({"main": "# App"}, llm_reply=LlmError("quota"))

        outcome = await use_case.execute("acme/foo")

        assert outcome.status is SummaryStatus.ERROR
        assert outcome.text == "quota"

    @pytest.mark.asyncio
    async def test_invalid_identifier_raises(self):
        use_case, _, _ = _build({})

        with pytest.raises(InvalidRequestError):
            await use_case.execute("nope")


class TestFindReadme:

    @pytest.mark.asyncio
    async def test_found_state_carries_content(self):
        use_case, fetcher, _ = _build({"main": "# Body"})

        lookup = await use_case.find_readme(RepositoryId("acme", "foo"), "main")

        assert lookup.state is ReadmeLookupState.FOUND
        assert lookup.content == "# Body"
        fetcher.fetch_raw_file.assert_awaited_once_with(RepositoryId("acme", "foo"), "main", README_PATH)

    @pytest.mark.asyncio
    async def test_not_found_state(self):
        use_case, _, _ = _build({})

        lookup = await use_case.find_readme(RepositoryId("acme", "foo"), None)

        assert lookup.state is ReadmeLookupState.NOT_FOUND
        assert lookup.branch is None
