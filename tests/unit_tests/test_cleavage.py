"""Unit tests for protease cleavage rules."""

import pytest

from alpharecode.config import ConfigurationError
from alpharecode.database.cleavage import (
    CleavageRule,
    Protease,
    ProteaseId,
    RELAXED_PROTEASES,
    STRICT_PROTEASES,
    get_protease,
    list_proteases,
    make_protease,
)


@pytest.fixture
def test_protease():
    """[RK] protease with one matcher and one exclusion."""
    return make_protease(
        "Test",
        "[RK]",
        1,
        matchers=[("DRI", 1, 1, 0)],
        exclusions=[("YYRYTI", 2, 3)],
    )


class TestCleavageRule:
    """Test windowed rule evaluation."""

    def test_window_inside_sequence(self):
        """Test window extraction away from the termini."""
        rule = CleavageRule("X", 2, 3)
        assert rule.window("TTTYYRYTITTT", 5) == "YYRYTI"

    def test_window_padded_at_n_terminus(self):
        """Test that windows before the first residue are padded."""
        rule = CleavageRule("X", 3, 1)
        assert rule.window("ABCD", 1) == "##ABC"

    def test_window_padded_at_c_terminus(self):
        """Test that windows past the last residue are padded."""
        rule = CleavageRule("X", 1, 2)
        assert rule.window("ABCD", 3) == "CD##"

    def test_window_length_is_fixed(self):
        """Test window length for every site of a short sequence."""
        rule = CleavageRule("X", 2, 2)
        for site in range(3):
            assert len(rule.window("ABC", site)) == 5

    def test_matcher_offset(self):
        """Test that a satisfied matcher reports its offset."""
        rule = CleavageRule("(WKP)|(MRP)|[KR][^P]", 1, 1, cut_offset=1)
        assert rule.offset_at("TMRPT", 2) == 1
        assert rule.offset_at("TYRPT", 2) is None
        assert rule.offset_at("TYRAT", 2) == 1

    def test_exclusion_flag(self):
        """Test that rules without offset are exclusions."""
        assert CleavageRule("CKD", 1, 1).is_exclusion
        assert not CleavageRule("K", 0, 0, cut_offset=1).is_exclusion

    def test_invalid_pattern_raises(self):
        """Test that malformed patterns fail at construction."""
        with pytest.raises(ConfigurationError, match="Invalid cleavage pattern"):
            CleavageRule("[RK", 0, 0, cut_offset=1)

    def test_negative_window_raises(self):
        """Test that negative window sizes are rejected."""
        with pytest.raises(ConfigurationError):
            CleavageRule("K", -1, 0)


class TestProtease:
    """Test protease site resolution."""

    def test_is_excluded(self, test_protease):
        """Test that the exclusion vetoes only its own window."""
        assert test_protease.is_excluded("TTTYYRYTITTT", 5)
        assert not test_protease.is_excluded("TTTZYRYTITTT", 5)

    def test_resolve_with_matcher(self, test_protease):
        """Test that a satisfied matcher gives its offset."""
        assert test_protease.resolve("TTTDRIYYY", 4) == [0]

    def test_resolve_without_matcher(self, test_protease):
        """Test that an unsatisfied matcher vetoes the site."""
        assert test_protease.resolve("TTTGRIYYY", 4) == []

    def test_resolve_excluded(self, test_protease):
        """Test that exclusions take precedence over matchers."""
        assert test_protease.resolve("TTTYYRYTITTT", 5) == []

    def test_default_offset_without_matchers(self):
        """Test that anchors always cut when there are no matchers."""
        lysc = make_protease("LysC", "K", 1)
        assert lysc.resolve("AKP", 1) == [1]

    def test_duplicate_offsets_kept(self):
        """Test that resolve reports every satisfied matcher."""
        protease = make_protease("Dup", "K", 1, matchers=[("K", 0, 0, 1), ("K", 0, 0, 1)])
        assert protease.resolve("AKA", 1) == [1, 1]

    def test_find_anchor(self):
        """Test anchor search from a position."""
        trypsin = get_protease("Trypsin")
        assert trypsin.find_anchor("AKTRL", 0) == 1
        assert trypsin.find_anchor("AKTRL", 2) == 3
        assert trypsin.find_anchor("AKTRL", 4) is None

    def test_with_rules(self):
        """Test that with_matcher/with_exclusion return new proteases."""
        base = make_protease("Base", "[RK]", 1)
        extended = base.with_matcher("DRI", 1, 1, 0).with_exclusion("YYRYTI", 2, 3)

        assert base.matcher_count == 0
        assert extended.matcher_count == 1
        assert extended.exclusion_count == 1
        assert extended.resolve("TTTDRIYYY", 4) == [0]

    def test_exclusion_with_offset_rejected(self):
        """Test that exclusions must not carry a cut offset."""
        with pytest.raises(ConfigurationError):
            Protease("Bad", "K", 1, exclusions=(CleavageRule("K", 0, 0, cut_offset=1),))


class TestProteaseTables:
    """Test built-in protease lookup."""

    def test_every_protease_has_both_rule_sets(self):
        """Test that strict and relaxed tables cover all proteases."""
        assert set(STRICT_PROTEASES) == set(ProteaseId)
        assert set(RELAXED_PROTEASES) == set(ProteaseId)

    def test_lookup_by_display_name(self):
        """Test lookup by the names used in configuration files."""
        assert ProteaseId.from_name("Pepsin, pH=1.3") is ProteaseId.PEPSIN_PH13
        assert ProteaseId.from_name("AspN/N->D") is ProteaseId.ASPN_GLU

    def test_lookup_case_insensitive(self):
        """Test case-insensitive lookup by display and member name."""
        assert ProteaseId.from_name("trypsin") is ProteaseId.TRYPSIN
        assert ProteaseId.from_name("non_specific") is ProteaseId.NON_SPECIFIC

    def test_unknown_protease(self):
        """Test that unknown names raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Unknown protease"):
            get_protease("Trypsinogen")

    def test_strict_and_relaxed_differ(self):
        """Test that strict trypsin has Expasy rules and relaxed has none."""
        strict = get_protease("Trypsin", strict=True)
        relaxed = get_protease("Trypsin", strict=False)

        assert strict.matcher_count == 1
        assert strict.exclusion_count == 1
        assert relaxed.matcher_count == 0
        assert relaxed.exclusion_count == 0

    def test_relaxed_pepsin_cuts_both_sides(self):
        """Test that relaxed pepsin cuts before and after F."""
        pepsin = get_protease("Pepsin, pH=1.3", strict=False)
        assert pepsin.resolve("TTFTT", 2) == [0, 1]

    def test_custom_protease_passthrough(self, test_protease):
        """Test that Protease instances are returned unchanged."""
        assert get_protease(test_protease) is test_protease

    def test_list_proteases(self):
        """Test that every display name is listed."""
        names = list_proteases()
        assert len(names) == len(ProteaseId)
        assert "Trypsin" in names
        assert "Non-specific" in names
