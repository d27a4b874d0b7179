import pytest

from argvet import (
    Group,
    MutuallyExclusiveViolationError,
    RegistrationConflictError,
    RequiredExclusiveGroupUnsatisfiedError,
    SpecificationError,
    Switch,
    Value,
)


@pytest.fixture
def ab(parser):
    a = parser.add(Switch("A", "sA"))
    b = parser.add(Switch("B", "sB"))
    return a, b


def test_group_requires_two_members():
    with pytest.raises(SpecificationError):
        Group([Switch("a")])


def test_group_rejects_individually_required_members():
    with pytest.raises(SpecificationError):
        Group([Switch("a"), Value("b", required=True)])


def test_group_rejects_duplicate_members():
    a = Switch("a")
    with pytest.raises(SpecificationError):
        Group([a, a])


def test_group_rejects_non_arguments():
    with pytest.raises(TypeError):
        Group([Switch("a"), "b"])


def test_group_evaluate_none_matched(ab):
    assert Group(ab).evaluate() is None
    error = Group(ab, required=True).evaluate()
    assert isinstance(error, RequiredExclusiveGroupUnsatisfiedError)
    assert error.arguments == ab
    assert str(error) == "Exactly one of the following arguments is required: {--sA, --sB}."


def test_required_group_exactly_one(parser, ab):
    parser.add_group(Group(ab, required=True))
    result = parser.parse(["-A"])
    assert result.ok
    assert ab[0].value is True
    assert ab[1].value is False


def test_required_group_both_from_bundle(parser, ab):
    group = parser.add_group(Group(ab, required=True))
    result = parser.parse(["-AB"])
    assert isinstance(result.error, MutuallyExclusiveViolationError)
    assert result.error.group is group
    assert result.error.arguments == ab
    assert str(result.error) == "Mutually exclusive arguments: {-A, -B}."


def test_required_group_both_separate(parser, ab):
    parser.add_group(Group(ab, required=True))
    result = parser.parse(["--sB", "-A"])
    assert isinstance(result.error, MutuallyExclusiveViolationError)
    assert str(result.error) == "Mutually exclusive arguments: {-A, --sB}."


def test_required_group_none(parser, ab):
    parser.add_group(Group(ab, required=True))
    result = parser.parse([])
    assert isinstance(result.error, RequiredExclusiveGroupUnsatisfiedError)
    assert set(result.error.arguments) == set(ab)


def test_optional_group_allows_none(parser, ab):
    parser.add_group(Group(ab))
    assert parser.parse([]).ok


def test_xor_registers_members(parser):
    a, b = Switch("A", "sA"), Value("B", "sB", type=int)
    group = parser.xor(a, b)
    assert group.required
    assert a in parser.arguments and b in parser.arguments
    assert a.group is group and b.group is group
    assert parser.groups == (group,)


def test_xor_conflict_does_not_register(parser):
    parser.add(Switch("A"))
    b = Switch("B")
    with pytest.raises(RegistrationConflictError):
        parser.xor(b, Switch("A", "other"))
    assert all(argument is not b for argument in parser.arguments)
    assert parser.groups == ()


def test_xor_group_conflict_does_not_register(parser, ab):
    parser.add_group(Group(ab))
    with pytest.raises(RegistrationConflictError):
        parser.xor(ab[0], Switch("C"))
    with pytest.raises(RegistrationConflictError):
        parser.xor(parser.help_switch, Switch("D"))
    assert [a.flag for a in parser.arguments] == ["h", "A", "B"]
    assert len(parser.groups) == 1


def test_add_group_requires_registered_members(parser):
    with pytest.raises(RegistrationConflictError):
        parser.add_group(Group([Switch("A"), Switch("B")]))


def test_argument_in_single_group(parser, ab):
    c = parser.add(Switch("C"))
    parser.add_group(Group(ab))
    with pytest.raises(RegistrationConflictError):
        parser.add_group(Group([ab[0], c]))
    assert c.group is None


def test_required_group_both_names_each(parser, ab):
    parser.add_group(Group(ab, required=True))
    result = parser.parse(["-A", "-B"])
    assert isinstance(result.error, MutuallyExclusiveViolationError)
    assert str(result.error) == "Mutually exclusive arguments: {-A, -B}."
