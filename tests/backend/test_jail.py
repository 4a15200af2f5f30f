"""Tests for the home-inside-jail check."""
import pytest

from s3jail.core.exceptions import JailMappingError
from s3jail.core.jail import check_containment, is_segment_prefix, split_segments


class TestSplitSegments:

    def test_drops_empty_and_dot(self) -> None:
        assert split_segments("/a//./b/") == ["a", "b"]

    def test_keeps_parent(self) -> None:
        assert split_segments("a/../b") == ["a", "..", "b"]


class TestIsSegmentPrefix:
    """Segment-aware prefix matching."""

    def test_equal_paths(self) -> None:
        assert is_segment_prefix("users/bob", "users/bob") is True

    def test_proper_prefix(self) -> None:
        assert is_segment_prefix("users", "users/bob") is True

    def test_raw_substring_rejected(self) -> None:
        """'users' is not a prefix of 'userstuff'."""
        assert is_segment_prefix("users", "userstuff") is False

    def test_longer_prefix_rejected(self) -> None:
        assert is_segment_prefix("users/bob/docs", "users/bob") is False

    def test_empty_prefix(self) -> None:
        assert is_segment_prefix("", "anything") is True

    def test_separators_ignored(self) -> None:
        assert is_segment_prefix("/users/", "users/bob/") is True


class TestCheckContainment:
    """Tests for check_containment."""

    def test_no_jail(self) -> None:
        """An empty jail accepts any home."""
        check_containment(home="anywhere", jail="")
        check_containment(home="", jail="")

    def test_home_equals_jail(self) -> None:
        check_containment(home="users", jail="users")

    def test_home_under_jail(self) -> None:
        check_containment(home="users/bob", jail="users")
        check_containment(home="users/bob/private", jail="users")

    def test_home_outside_jail(self) -> None:
        with pytest.raises(JailMappingError) as exc_info:
            check_containment(home="home", jail="jail")
        assert str(exc_info.value) == "User directory is outside jailed path: jail: home"
        assert exc_info.value.jail == "jail"
        assert exc_info.value.home == "home"

    def test_substring_home_rejected(self) -> None:
        """A home sharing only a character prefix with the jail is outside it."""
        with pytest.raises(JailMappingError):
            check_containment(home="userstuff", jail="users")

    def test_empty_home_with_jail_rejected(self) -> None:
        with pytest.raises(JailMappingError, match="outside jailed path: users: $"):
            check_containment(home="", jail="users")

    def test_parent_segment_in_home_rejected(self) -> None:
        """A home that climbs out through '..' is outside the jail."""
        with pytest.raises(JailMappingError, match="^User directory is outside jailed path: users: users/../admin$"):
            check_containment(home="users/../admin", jail="users")

    def test_parent_segment_in_home_equal_to_jail_rejected(self) -> None:
        with pytest.raises(JailMappingError):
            check_containment(home="users/..", jail="users/..")

    def test_parent_segment_without_jail_allowed(self) -> None:
        """Without a jail there is nothing to escape."""
        check_containment(home="a/../b", jail="")
