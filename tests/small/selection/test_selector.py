"""Tests for change-impact test selection."""

from __future__ import annotations

import pytest

from pytest_impact.selection.selector import (
    DEFAULT_MAX_FILES,
    EscalationReason,
    SelectionMode,
    full_mapping,
    select,
    select_tests,
    select_tests_from_file,
)


@pytest.fixture
def mapping():
    """Create a mapping with two disjoint prefixes."""
    return {'src/a/': ['T1', 'T2'], 'src/b/': ['T3']}


def _union(mapping):
    return {test for tests in mapping.values() for test in tests}


class TestPreciseSelection:
    """Test selection when every changed file is covered by a prefix."""

    def test_single_file_selects_its_prefix_tests(self, mapping):
        assert select_tests({'src/a/file.cs'}, mapping) == {'T1', 'T2'}

    def test_files_under_different_prefixes_are_unioned(self, mapping):
        result = select_tests({'src/a/file.cs', 'src/b/other.cs'}, mapping)
        assert result == {'T1', 'T2', 'T3'}

    def test_duplicate_tests_across_prefixes_collapse(self):
        mapping = {'src/a/': ['T1', 'T2'], 'src/b/': ['T2', 'T2']}
        result = select_tests({'src/a/x', 'src/b/y'}, mapping)
        assert result == {'T1', 'T2'}

    def test_accepts_any_iterable_of_paths(self, mapping):
        assert select_tests(['src/a/file.cs', 'src/a/file.cs'], mapping) == {'T1', 'T2'}

    def test_result_reports_precise_mode(self, mapping):
        result = select({'src/b/other.cs'}, mapping)
        assert result.mode == SelectionMode.PRECISE
        assert result.reason is None
        assert not result.is_escalated
        assert result.matched_prefixes == {'src/b/other.cs': 'src/b/'}

    def test_prefix_match_is_literal(self):
        mapping = {'src/a': ['Ta'], 'other/': ['To']}
        # 'src/a' is a literal prefix of 'src/ab/x', not a directory match
        assert select_tests({'src/ab/x.py'}, mapping) == {'Ta'}

    def test_prefix_match_is_case_sensitive(self, mapping):
        assert select_tests({'SRC/A/file.cs'}, mapping) == _union(mapping)


class TestFirstMatchWins:
    """Test that overlapping prefixes resolve in mapping iteration order."""

    def test_broader_prefix_listed_first_wins(self, overlapping_mapping):
        assert list(overlapping_mapping) == ['src/', 'src/a/']

        assert select_tests({'src/a/x.cs'}, overlapping_mapping) == {'Tall'}

    def test_narrower_prefix_listed_first_wins(self):
        mapping = {'src/a/': ['Ta'], 'src/': ['Tall']}
        assert list(mapping) == ['src/a/', 'src/']

        assert select_tests({'src/a/x.cs'}, mapping) == {'Ta'}

    def test_later_prefix_still_claims_files_the_first_does_not_match(self):
        mapping = {'src/a/': ['Ta'], 'src/': ['Tall']}
        assert select_tests({'src/a/x.cs', 'src/z.cs'}, mapping) == {'Ta', 'Tall'}


class TestFullMappingEscalation:
    """Test the fallbacks that select every test in the mapping."""

    def test_empty_change_set_selects_everything(self, mapping):
        result = select(set(), mapping)
        assert result.tests == frozenset(_union(mapping))
        assert result.mode == SelectionMode.FULL_MAPPING
        assert result.reason == EscalationReason.NO_CHANGED_FILES

    def test_threshold_breach_selects_everything(self, mapping):
        changed = {f'src/a/file{i}.cs' for i in range(DEFAULT_MAX_FILES)}
        result = select(changed, mapping)
        assert result.tests == frozenset(_union(mapping))
        assert result.reason == EscalationReason.TOO_MANY_CHANGED_FILES
        assert result.changed_file_count == DEFAULT_MAX_FILES

    def test_threshold_breach_ignores_whether_files_match(self, mapping):
        changed = {f'unknown/file{i}.cs' for i in range(DEFAULT_MAX_FILES + 5)}
        assert select_tests(changed, mapping) == _union(mapping)

    def test_one_below_threshold_stays_precise(self, mapping):
        changed = {f'src/a/file{i}.cs' for i in range(DEFAULT_MAX_FILES - 1)}
        result = select(changed, mapping)
        assert result.mode == SelectionMode.PRECISE
        assert result.tests == frozenset({'T1', 'T2'})

    def test_custom_threshold(self, mapping):
        result = select({'src/a/x', 'src/a/y'}, mapping, max_files=2)
        assert result.reason == EscalationReason.TOO_MANY_CHANGED_FILES
        assert result.tests == frozenset(_union(mapping))

    def test_unmapped_file_escalates(self, mapping):
        result = select({'src/a/file.cs', 'unknown/file.cs'}, mapping)
        assert result.tests == frozenset({'T1', 'T2', 'T3'})
        assert result.reason == EscalationReason.UNMAPPED_FILE
        assert result.unmapped_file == 'unknown/file.cs'
        assert result.matched_prefixes == {}

    def test_full_mapping_unions_all_values(self):
        mapping = {'a/': ['T1', 'T2'], 'b/': ['T2', 'T3'], 'c/': []}
        assert full_mapping(mapping) == {'T1', 'T2', 'T3'}


class TestSelectionInvariants:
    """Test properties that hold for every valid input."""

    @pytest.mark.parametrize(
        'changed',
        [
            set(),
            {'src/a/file.cs'},
            {'src/b/x', 'src/a/y'},
            {'nowhere/file.cs'},
            {f'f{i}' for i in range(400)},
        ],
    )
    def test_result_is_subset_of_mapping_union(self, mapping, changed):
        assert select_tests(changed, mapping) <= _union(mapping)

    def test_repeated_calls_are_identical(self, mapping):
        changed = {'src/a/file.cs', 'src/b/other.cs'}
        assert select(changed, mapping) == select(changed, mapping)

    def test_inputs_are_not_mutated(self, mapping):
        changed = {'src/a/file.cs', 'unknown/file.cs'}
        select_tests(changed, mapping)
        assert changed == {'src/a/file.cs', 'unknown/file.cs'}
        assert mapping == {'src/a/': ['T1', 'T2'], 'src/b/': ['T3']}


class TestInvalidInput:
    """Test rejection of malformed input."""

    def test_none_mapping_raises(self):
        with pytest.raises(ValueError, match='cannot be None'):
            select_tests({'src/a/x'}, None)

    def test_empty_mapping_raises(self):
        with pytest.raises(ValueError, match='does not contain any elements'):
            select_tests({'src/a/x'}, {})

    def test_empty_mapping_raises_for_empty_change_set(self):
        with pytest.raises(ValueError, match='does not contain any elements'):
            select_tests(set(), {})

    def test_none_changed_files_raises(self, mapping):
        with pytest.raises(ValueError, match='files changed cannot be None'):
            select_tests(None, mapping)

    def test_none_element_raises(self, mapping):
        with pytest.raises(ValueError, match='is None'):
            select_tests({'src/a/x', None}, mapping)

    def test_none_element_raises_even_after_unmapped_file(self, mapping):
        with pytest.raises(ValueError, match='is None'):
            select_tests(['unknown/file.cs', None], mapping)

    def test_none_element_raises_above_threshold(self, mapping):
        changed = [f'src/a/file{i}' for i in range(DEFAULT_MAX_FILES)] + [None]
        with pytest.raises(ValueError, match='is None'):
            select_tests(changed, mapping)

    def test_non_string_element_raises(self, mapping):
        with pytest.raises(ValueError, match='must be strings'):
            select_tests({'src/a/x', 42}, mapping)

    @pytest.mark.parametrize('element', [['src/a/x'], {'src/a/x'}, {'k': 'v'}])
    def test_unhashable_element_raises_value_error(self, mapping, element):
        with pytest.raises(ValueError, match='must be strings'):
            select_tests(['src/a/y', element], mapping)

    def test_bare_string_raises(self, mapping):
        with pytest.raises(ValueError, match='not a single string'):
            select_tests('src/a/x', mapping)

    @pytest.mark.parametrize('max_files', [0, -1, True, 2.5])
    def test_invalid_threshold_raises(self, mapping, max_files):
        with pytest.raises(ValueError, match='max_files'):
            select_tests({'src/a/x'}, mapping, max_files=max_files)

    def test_full_mapping_rejects_empty_mapping(self):
        with pytest.raises(ValueError, match='does not contain any elements'):
            full_mapping({})


class TestSelectFromFile:
    """Test selection with a mapping artifact on disk."""

    def test_loads_mapping_and_selects(self, tmp_path):
        mapping_path = tmp_path / 'impact.json'
        mapping_path.write_text('{"src/a/": ["T1"], "src/b/": ["T3"]}')

        assert select_tests_from_file({'src/b/x'}, mapping_path) == {'T3'}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            select_tests_from_file({'src/b/x'}, tmp_path / 'missing.json')

    def test_none_path_raises(self):
        with pytest.raises(ValueError, match='file path cannot be None'):
            select_tests_from_file({'src/b/x'}, None)

    def test_none_changed_files_raises(self, tmp_path):
        mapping_path = tmp_path / 'impact.json'
        mapping_path.write_text('{"src/a/": ["T1"]}')

        with pytest.raises(ValueError, match='list of files changed cannot be None'):
            select_tests_from_file(None, mapping_path)

    def test_empty_mapping_file_raises(self, tmp_path):
        mapping_path = tmp_path / 'impact.json'
        mapping_path.write_text('{}')

        with pytest.raises(ValueError, match='does not contain any elements'):
            select_tests_from_file({'src/a/x'}, mapping_path)
