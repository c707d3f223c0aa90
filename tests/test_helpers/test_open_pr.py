# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for devhelpers.helpers.open_pr."""

from unittest.mock import MagicMock, patch

import pytest

from devhelpers.errors import GitCommandFailed, UserAborted
from devhelpers.helpers.open_pr import DIRTY_PROMPT, ask_yes_no, open_pr
from devhelpers.vcs import GitClient


def never_asked(prompt: str) -> bool:
    raise AssertionError(f"unexpected prompt: {prompt}")


class TestAskYesNo:
    @pytest.mark.parametrize("answer", ["y", "Y", "yes", " YES "])
    def test_confirms(self, answer: str) -> None:
        with patch("builtins.input", return_value=answer):
            assert ask_yes_no("go? ") is True

    @pytest.mark.parametrize("answer", ["", "n", "no", "sure"])
    def test_declines(self, answer: str) -> None:
        with patch("builtins.input", return_value=answer):
            assert ask_yes_no("go? ") is False

    def test_eof_declines(self) -> None:
        with patch("builtins.input", side_effect=EOFError):
            assert ask_yes_no("go? ") is False


class TestOpenPr:
    def test_clean_pushed_tree_does_not_push(self, fake_vcs, fake_ci) -> None:
        fake_vcs.current = "feature"

        result = open_pr(fake_vcs, fake_ci, confirm=never_asked)

        assert fake_vcs.calls == []
        assert fake_ci.calls == [("create", "None")]
        assert result.pushed is False

    def test_unpushed_commits_pushed_once_before_flow(
        self, fake_vcs, fake_ci
    ) -> None:
        fake_vcs.current = "feature"
        fake_vcs.ahead = 3
        order: list[str] = []
        fake_vcs.push = MagicMock(side_effect=lambda b: order.append("push"))
        fake_ci.open_create_flow = MagicMock(
            side_effect=lambda base=None: order.append("create")
        )

        result = open_pr(fake_vcs, fake_ci, confirm=never_asked)

        fake_vcs.push.assert_called_once_with("feature")
        assert order == ["push", "create"]
        assert result.pushed is True

    def test_dirty_tree_confirmed(self, fake_vcs, fake_ci) -> None:
        fake_vcs.current = "feature"
        fake_vcs.dirty = True
        prompts: list[str] = []

        def confirm(prompt: str) -> bool:
            prompts.append(prompt)
            return True

        open_pr(fake_vcs, fake_ci, confirm=confirm)

        assert prompts == [DIRTY_PROMPT]
        assert fake_ci.calls == [("create", "None")]

    def test_dirty_tree_declined(self, fake_vcs, fake_ci) -> None:
        fake_vcs.current = "feature"
        fake_vcs.dirty = True
        fake_vcs.ahead = 1

        with pytest.raises(UserAborted):
            open_pr(fake_vcs, fake_ci, confirm=lambda _p: False)

        assert fake_vcs.calls == []
        assert fake_ci.calls == []

    def test_base_passed_through(self, fake_vcs, fake_ci) -> None:
        fake_vcs.current = "feature"
        open_pr(fake_vcs, fake_ci, confirm=never_asked, base="staging")
        assert fake_ci.calls == [("create", "staging")]

    def test_no_upstream_pushed_once(self, fake_vcs, fake_ci) -> None:
        fake_vcs.current = "feature"
        fake_vcs.has_upstream = False

        result = open_pr(fake_vcs, fake_ci, confirm=never_asked)

        assert fake_vcs.calls == [("push", "feature")]
        assert result.pushed is True

    def test_detached_head(self, fake_vcs, fake_ci) -> None:
        fake_vcs.current = None
        fake_vcs.ahead = 1

        with pytest.raises(GitCommandFailed, match="detached"):
            open_pr(fake_vcs, fake_ci, confirm=never_asked)

        assert fake_vcs.calls == []


class TestOpenPrWithGit:
    def test_new_branch_is_pushed(self, git_repo, git, commit, fake_ci) -> None:
        git(git_repo, "checkout", "-b", "feature")
        commit(git_repo, "work.txt")

        result = open_pr(GitClient(git_repo), fake_ci, confirm=never_asked)

        assert result.pushed is True
        remote_heads = git(git_repo, "ls-remote", "--heads", "origin")
        assert "refs/heads/feature" in remote_heads

    def test_branch_pushed_without_upstream_is_pushed_again(
        self, git_repo, git, commit, fake_ci
    ) -> None:
        git(git_repo, "checkout", "-b", "feature")
        commit(git_repo, "work.txt")
        git(git_repo, "push", "origin", "feature")
        client = GitClient(git_repo)
        assert client.status().has_upstream is False

        result = open_pr(client, fake_ci, confirm=never_asked)

        assert result.pushed is True
        assert client.upstream() == "origin/feature"
        assert fake_ci.calls == [("create", "None")]

    def test_tracked_and_pushed_branch_is_not_pushed(
        self, git_repo, git, commit, fake_ci
    ) -> None:
        git(git_repo, "checkout", "-b", "feature")
        commit(git_repo, "work.txt")
        git(git_repo, "push", "-u", "origin", "feature")

        result = open_pr(GitClient(git_repo), fake_ci, confirm=never_asked)

        assert result.pushed is False
