"""
Unit tests for splitting identifiers into components and structure sections.
"""

import pytest
from moleco.processors.errors import (
    EmptyIdentifier,
    IncompleteMixtureStructure,
    UnsupportedFormat
)
from moleco.processors.identifier_splitter import split_identifier

CAFFEINE = "InChI=1S/C8H10N4O2/c1-10-4-9-6-5(10)7(13)12(3)8(14)11(6)2/h4H,1-3H3"

# 37% wt. Formaldehyde in Water with 10-15% Methanol
FORMALDEHYDE = (
    "MInChI=0.00.1S/CH2O/c1-2/h1H2&CH4O/c1-2/h2H,1H3&H2O/h1H2"
    "/n{{1&3}&2}/g{{37wf-2&}&10:15pp0}"
)


class TestSingleSubstance:
    """Test cases for InChI identifiers."""

    def test_caffeine(self):
        """Test that the version prefix is removed from the substance identifier."""
        result = split_identifier(CAFFEINE)
        assert result.notation == "InChI"
        assert result.version == "1S"
        assert result.components == ("C8H10N4O2/c1-10-4-9-6-5(10)7(13)12(3)8(14)11(6)2/h4H,1-3H3",)
        assert result.component_offsets == (9,)
        assert not result.is_mixture

    def test_surrounding_whitespace(self):
        """Test that surrounding whitespace is ignored but still counted in offsets."""
        result = split_identifier("  " + CAFFEINE + "\n")
        plain = split_identifier(CAFFEINE)
        assert result.components == plain.components
        assert result.version == plain.version
        assert result.component_offsets == (plain.component_offsets[0] + 2,)

    def test_padded_error_offset(self):
        """Test that error offsets on padded input point into the padded text."""
        with pytest.raises(UnsupportedFormat) as excinfo:
            split_identifier("  CCO")
        assert excinfo.value.offset == 2

        padded = "  InChI=1/H2O/h1H2"
        with pytest.raises(UnsupportedFormat) as excinfo:
            split_identifier(padded, strict_version_check=True)
        assert excinfo.value.offset == padded.index("1/")

    def test_unsupported_version_strict(self):
        """Test that non-standard InChI versions are rejected in strict mode."""
        with pytest.raises(UnsupportedFormat, match="version"):
            split_identifier("InChI=1/H2O/h1H2")

    def test_unsupported_version_lenient(self):
        """Test that the version check can be skipped."""
        result = split_identifier("InChI=1/H2O/h1H2", strict_version_check=False)
        assert result.version == "1"
        assert result.components == ("H2O/h1H2",)

    def test_keys_rejected(self):
        """Test that hashed keys cannot be decomposed."""
        with pytest.raises(UnsupportedFormat, match="hashed key"):
            split_identifier("InChIKey=RYYVLZVUVIJVGH-UHFFFAOYSA-N")
        with pytest.raises(UnsupportedFormat, match="hashed key"):
            split_identifier("MInChIKey=AAAAAAAAAAAAAA-BBBBBBBBBB-N")

    def test_unknown_prefix(self):
        """Test error handling for unrecognized notations."""
        with pytest.raises(UnsupportedFormat, match="No InChI or MInChI"):
            split_identifier("CCO")
        with pytest.raises(UnsupportedFormat, match="Unrecognized format tag"):
            split_identifier("SMILES=CCO")

    def test_empty_inputs(self):
        """Test error handling for empty inputs."""
        with pytest.raises(EmptyIdentifier, match="non-empty string"):
            split_identifier("")
        with pytest.raises(EmptyIdentifier, match="non-empty string"):
            split_identifier("   ")
        with pytest.raises(EmptyIdentifier, match="no structure layers"):
            split_identifier("InChI=1S/")
        with pytest.raises(EmptyIdentifier, match="no structure layers"):
            split_identifier("InChI=1S")


class TestMixture:
    """Test cases for MInChI identifiers."""

    def test_formaldehyde_components(self):
        """Test splitting components and sections."""
        result = split_identifier(FORMALDEHYDE)
        assert result.notation == "MInChI"
        assert result.version == "0.00.1S"
        assert result.components == ("CH2O/c1-2/h1H2", "CH4O/c1-2/h2H,1H3", "H2O/h1H2")
        assert result.grouping.text == "n{{1&3}&2}"
        assert result.weighting.text == "g{{37wf-2&}&10:15pp0}"
        assert result.is_mixture

    def test_offsets_point_into_text(self):
        """Test that every offset locates its text in the full identifier."""
        result = split_identifier(FORMALDEHYDE)
        for component, offset in zip(result.components, result.component_offsets):
            assert FORMALDEHYDE[offset:offset + len(component)] == component
        assert FORMALDEHYDE[result.grouping.offset:].startswith(result.grouping.text)
        assert FORMALDEHYDE[result.weighting.offset:] == result.weighting.text

    def test_padded_offsets_point_into_text(self):
        """Test that offsets of padded input locate their text in the padded identifier."""
        padded = " \t" + FORMALDEHYDE + "  "
        result = split_identifier(padded)
        for component, offset in zip(result.components, result.component_offsets):
            assert padded[offset:offset + len(component)] == component
        assert padded[result.weighting.offset:].startswith(result.weighting.text)

    def test_single_component_without_sections(self):
        """Test that a one-component MInChI without sections is a single substance."""
        result = split_identifier("MInChI=0.00.1S/H2O/h1H2")
        assert result.components == ("H2O/h1H2",)
        assert not result.is_mixture

    def test_grouping_without_weighting(self):
        """Test that a lone grouping section is rejected."""
        with pytest.raises(IncompleteMixtureStructure, match="without a following weighting"):
            split_identifier("MInChI=0.00.1S/H2O/h1H2&CH4O/c1-2/h2H,1H3/n{1&2}")

    def test_weighting_without_grouping(self):
        """Test that a lone weighting section is rejected."""
        with pytest.raises(IncompleteMixtureStructure, match="without a preceding grouping"):
            split_identifier("MInChI=0.00.1S/H2O/h1H2&CH4O/c1-2/h2H,1H3/g{50pp0&50pp0}")

    def test_sections_in_wrong_order(self):
        """Test that the weighting section must come last."""
        with pytest.raises(IncompleteMixtureStructure):
            split_identifier("MInChI=0.00.1S/H2O/h1H2&CH4O/c1-2/h2H,1H3/g{50pp0&50pp0}/n{1&2}")

    def test_mixture_without_sections(self):
        """Test that several components require both sections."""
        with pytest.raises(IncompleteMixtureStructure, match="2 components"):
            split_identifier("MInChI=0.00.1S/H2O/h1H2&CH4O/c1-2/h2H,1H3")

    def test_empty_component(self):
        """Test that empty components between separators are rejected."""
        text = "MInChI=0.00.1S/H2O/h1H2&&CH4O/c1-2/h2H,1H3/n{1&2}/g{&}"
        with pytest.raises(EmptyIdentifier, match="Component 2 is empty") as excinfo:
            split_identifier(text)
        assert excinfo.value.offset == text.index("&&") + 1

    def test_unsupported_mixture_version(self):
        """Test the MInChI version check."""
        with pytest.raises(UnsupportedFormat):
            split_identifier("MInChI=0.01S/H2O/h1H2")
        result = split_identifier("MInChI=0.01S/H2O/h1H2", strict_version_check=False)
        assert result.version == "0.01S"
