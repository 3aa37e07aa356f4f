# tests/test_bindings.py
"""
Tests for binding-site classification and attribute value validation.
"""

import pytest

from twistlint.bindings import (
    AttributeValueValidator,
    BindingForm,
    BindingSiteClassifier,
    IterationPair,
    Parameter,
    SingleValue,
    TagKind,
    binds,
)
from twistlint.diagnostics import FindingKind
from twistlint.nodes import JSXElement
from twistlint.parser import parse


def _element(source):
    program = parse(source)
    return next(n for n in program.walk() if isinstance(n, JSXElement))


@pytest.fixture
def classifier():
    return BindingSiteClassifier()


@pytest.fixture
def validator_for():
    """``validator_for(source)`` → (validator, reported findings)."""
    def _make(source):
        reported = []
        return AttributeValueValidator(source, reported.append), reported
    return _make


class TestClassifier:

    @pytest.mark.parametrize("src, kind", [
        ("<repeat></repeat>;", TagKind.REPEAT),
        ("<using></using>;", TagKind.USING),
        ("<MyComponent></MyComponent>;", TagKind.GENERIC),
        ("<dialog:footer></dialog:footer>;", TagKind.GENERIC),
        ("<div></div>;", TagKind.GENERIC),
        ("<A.B></A.B>;", TagKind.NONE),
    ])
    def test_tag_kinds(self, classifier, src, kind):
        assert classifier.classify(_element(src)).tag_kind is kind

    def test_repeat_for(self, classifier):
        result = classifier.classify(_element("<repeat for={ x in xs }></repeat>;"))
        (attribute,) = result.binding_attributes
        assert attribute.attribute_name == "for"
        assert attribute.form is BindingForm.ITERATION
        assert attribute.raw_value.type == "BinaryExpression"

    def test_repeat_collection_as(self, classifier):
        result = classifier.classify(_element("<repeat collection={ xs } as={ x }></repeat>;"))
        assert [a.attribute_name for a in result.binding_attributes] == ["as"]
        assert result.get("as").form is BindingForm.ITERATION

    def test_repeat_with_both(self, classifier):
        result = classifier.classify(
            _element("<repeat for={ x in xs } as={ y }></repeat>;"))
        assert [a.attribute_name for a in result.binding_attributes] == ["for", "as"]

    def test_using_as_is_single(self, classifier):
        result = classifier.classify(_element("<using value={ v } as={ x }></using>;"))
        assert result.get("as").form is BindingForm.SINGLE

    def test_generic_as_is_parameter(self, classifier):
        result = classifier.classify(_element("<MyComponent as={ data }></MyComponent>;"))
        assert result.get("as").form is BindingForm.PARAMETER

    def test_for_only_binds_on_repeat(self, classifier):
        result = classifier.classify(_element("<label for={ x in xs }></label>;"))
        assert result.binding_attributes == []

    def test_member_tags_bind_nothing(self, classifier):
        result = classifier.classify(_element("<A.B as={ x }></A.B>;"))
        assert result.binding_attributes == []

    def test_last_duplicate_wins(self, classifier):
        element = _element("<X as={ first } as={ second }></X>;")
        result = classifier.classify(element)
        (attribute,) = result.binding_attributes
        assert attribute.node is element.opening_element.attributes[1]

    def test_string_value(self, classifier):
        result = classifier.classify(_element('<X as="name"></X>;'))
        assert result.get("as").raw_value.type == "Literal"

    def test_accepts_opening_element(self, classifier):
        element = _element("<X as={ y }></X>;")
        result = classifier.classify(element.opening_element)
        assert result.get("as") is not None


class TestValidator:

    def _attribute(self, classifier, src, name="as"):
        return classifier.classify(_element(src)).get(name)

    def test_identifier(self, classifier, validator_for):
        src = "<X as={ y }></X>;"
        validator, reported = validator_for(src)
        assert validator.extract_names(self._attribute(classifier, src)) == ("y",)
        assert reported == []

    def test_pair(self, classifier, validator_for):
        src = "<X as={ a, b }></X>;"
        validator, _ = validator_for(src)
        assert validator.extract_names(self._attribute(classifier, src)) == ("a", "b")

    def test_for_takes_left_of_in(self, classifier, validator_for):
        src = "<repeat for={ (item, index) in items }></repeat>;"
        validator, _ = validator_for(src)
        attribute = self._attribute(classifier, src, "for")
        assert validator.extract_names(attribute) == ("item", "index")

    @pytest.mark.parametrize("value, text", [
        ("this.fruit", "this.fruit"),
        ("f()", "f()"),
        ("a, b, c", "a, b, c"),
        ("a, b.c", "a, b.c"),
    ])
    def test_invalid_values(self, classifier, validator_for, value, text):
        src = f"<X as={{ {value} }}></X>;"
        validator, reported = validator_for(src)
        assert validator.extract_names(self._attribute(classifier, src)) is None
        (finding,) = reported
        assert finding.kind is FindingKind.INVALID_BINDING_VALUE
        assert finding.node.type == "JSXAttribute"
        assert finding.message == (
            f'"{text}" is not an identifier. '
            'The "as" attribute can only be used with an identifier.'
        )

    def test_for_without_in_reports_whole_value(self, classifier, validator_for):
        src = "<repeat for={ items }></repeat>;"
        validator, reported = validator_for(src)
        assert validator.extract_names(self._attribute(classifier, src, "for")) is None
        assert '"items" is not an identifier.' in reported[0].message
        assert 'The "for" attribute' in reported[0].message

    def test_string_value_is_invalid(self, classifier, validator_for):
        src = '<X as="name"></X>;'
        validator, reported = validator_for(src)
        assert validator.extract_names(self._attribute(classifier, src)) is None
        assert reported[0].message.startswith('""name"" is not an identifier.')

    def test_reported_once(self, classifier, validator_for):
        src = "<X as={ this.x }></X>;"
        validator, reported = validator_for(src)
        attribute = self._attribute(classifier, src)
        for _ in range(3):
            validator.extract_names(attribute)
            validator.grammar(attribute)
        assert len(reported) == 1

    def test_grammar_shapes(self, classifier, validator_for):
        src = "<repeat for={ a in xs }><using as={ b }><X as={ c, d }></X></using></repeat>;"
        validator, _ = validator_for(src)
        program = parse(src)
        elements = [n for n in program.walk() if isinstance(n, JSXElement)]
        results = []
        for element in elements:
            for attribute in classifier.classify(element).binding_attributes:
                results.append(validator.grammar(attribute))
        assert results == [IterationPair("a"), SingleValue("b"), Parameter("c", "d")]

    def test_using_pair_is_parameter(self, classifier, validator_for):
        src = "<using as={ a, b }></using>;"
        validator, _ = validator_for(src)
        assert validator.grammar(self._attribute(classifier, src)) == Parameter("a", "b")


class TestBinds:

    def test_binds(self):
        assert binds(IterationPair("item", "index"), "index")
        assert binds(SingleValue("x"), "x")
        assert binds(Parameter("p"), "p")
        assert not binds(Parameter("p"), "q")
        assert not binds(None, "x")
