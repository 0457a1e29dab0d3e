"""Tests for team name normalization and matching."""

from uclrace.name_matcher import CoefficientMatcher, TeamNameIndex, names_match, normalize_name


class TestNormalizeName:
    """Tests for normalize_name."""

    def test_diacritics_removed(self):
        assert normalize_name('Beşiktaş J.K.') == 'besiktas j k'
        assert normalize_name('Slavia Praha') == normalize_name('SLÁVIA  PRAHA')

    def test_punctuation_collapsed(self):
        assert normalize_name('  FK  Crvena-Zvezda ') == 'fk crvena zvezda'

    def test_empty(self):
        assert normalize_name(None) == ''
        assert normalize_name('') == ''

    def test_names_match(self):
        assert names_match('Olympiakos Piraeus', 'olympiakos piraeus')
        assert not names_match('', '')


class TestTeamNameIndex:
    """Tests for id-first lookup."""

    def test_id_wins_over_name(self):
        index = TeamNameIndex()
        index.add('salzburg', 571, 'Red Bull Salzburg')
        index.add('sturm', 637, 'Sturm Graz')

        assert index.find(571, 'Sturm Graz') == 'salzburg'

    def test_name_fallback(self):
        index = TeamNameIndex()
        index.add('zvezda', 598, 'FK Crvena Zvezda')

        assert index.find(None, 'FK Crvena-Zvezda') == 'zvezda'
        assert index.find(999, 'Crvena Zvezda') is None


class TestCoefficientMatcher:
    """Tests for the coefficient join."""

    def test_exact_match(self):
        matcher = CoefficientMatcher([('Celtic', 1), ('Rangers', 2)])
        assert matcher.match('celtic') == 1

    def test_prefix_difference(self):
        """Test 'FK Crvena Zvezda' against a table listing 'Crvena Zvezda'."""
        matcher = CoefficientMatcher([('Crvena Zvezda', 'zvezda'), ('Partizan', 'partizan')])
        assert matcher.match('FK Crvena Zvezda') == 'zvezda'

    def test_alias(self):
        matcher = CoefficientMatcher(
            [('Olympiacos', 'oly'), ('PAOK', 'paok')],
            aliases={'Olympiakos Piraeus': ['Olympiacos']},
        )
        assert matcher.match('Olympiakos Piraeus') == 'oly'

    def test_alias_group_is_symmetric(self):
        matcher = CoefficientMatcher(
            [('Salzburg', 'rbs')],
            aliases={'Red Bull Salzburg': ['Salzburg', 'FC Salzburg']},
        )
        assert matcher.match('FC Salzburg') == 'rbs'

    def test_ambiguous_containment_rejected(self):
        """Test that containment only applies with exactly one candidate."""
        matcher = CoefficientMatcher([('Slavia Praha', 'slavia'), ('Sparta Praha', 'sparta')])
        assert matcher.match('Praha') is None

    def test_no_partial_word_match(self):
        matcher = CoefficientMatcher([('Basel', 'basel')])
        assert matcher.match('Base') is None
