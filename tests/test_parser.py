import pytest

from argvet import (
    Choices,
    ConversionError,
    DuplicateArgumentError,
    MissingValueError,
    MultiPositional,
    MultiSwitch,
    MultiValue,
    Parser,
    Positional,
    RegistrationConflictError,
    RequiredArgumentMissingError,
    SilentOutput,
    SpecificationError,
    State,
    Switch,
    UnexpectedArgumentError,
    UnknownArgumentError,
    Value,
)
from argvet.parser import normalize_tokens


def test_normalize_tokens_string():
    assert normalize_tokens('--name "a b" -v') == ["--name", "a b", "-v"]


def test_normalize_tokens_default_argv(monkeypatch):
    monkeypatch.setattr("sys.argv", ["prog", "-v"])
    assert normalize_tokens(None) == ["-v"]


def test_builtin_switches():
    parser = Parser("prog", version="1.2")
    assert parser.help_switch is not None
    assert parser.help_switch.names == ("-h", "--help")
    assert parser.version_switch is not None
    assert parser.version_switch.names == ("--version",)
    assert parser.values() == {}


def test_no_builtin_switches():
    parser = Parser("prog", add_help=False)
    assert parser.help_switch is None
    assert parser.version_switch is None
    assert parser.arguments == ()


def test_value_inline_and_separate(parser):
    count = parser.add(Value("c", "count", type=int))
    assert parser.parse(["--count=42"]).ok
    assert count.value == 42

    parser = Parser("prog", output=SilentOutput())
    count = parser.add(Value("c", "count", type=int))
    assert parser.parse(["--count", "42"]).ok
    assert count.value == 42


def test_conversion_error_names_token(parser):
    parser.add(Value("c", "count", type=int))
    result = parser.parse(["--count=abc"])
    assert isinstance(result.error, ConversionError)
    assert "abc" in str(result.error)
    assert result.error.input_tokens == ["--count=abc"]
    assert parser.state is State.FAILED


def test_raise_for_error(parser):
    parser.add(Value("c", "count", type=int))
    result = parser.parse(["-c"])
    with pytest.raises(MissingValueError):
        result.raise_for_error()


def test_single_prefix_long_names():
    parser = Parser("prog", name_prefix="-", output=SilentOutput())
    tags = parser.add(MultiValue("", "tag"))
    assert parser.parse(["-tag", "x", "-tag", "y"]).ok
    assert tags.values == ["x", "y"]


def test_short_flag_bundle(parser):
    a = parser.add(Switch("a"))
    b = parser.add(Switch("b"))
    c = parser.add(Value("c", type=int))
    assert parser.parse(["-abc", "3"]).ok
    assert a.value and b.value
    assert c.value == 3


def test_short_flag_bundle_inline_value(parser):
    a = parser.add(Switch("a"))
    c = parser.add(Value("c", type=int))
    assert parser.parse(["-ac=3"]).ok
    assert a.value
    assert c.value == 3


def test_short_flag_bundle_value_not_last(parser):
    parser.add(Switch("a"))
    parser.add(Value("c", type=int))
    result = parser.parse(["-ca", "3"])
    assert isinstance(result.error, UnknownArgumentError)
    assert str(result.error) == (
        'Unknown argument: "-ca". "-c" requires a value and must be the last flag of a combined group.'
    )


def test_multi_switch_bundle(parser):
    verbose = parser.add(MultiSwitch("v", "verbose"))
    assert parser.parse(["-vvv", "--verbose"]).ok
    assert verbose.value == 4


def test_unknown_argument_suggestion(parser):
    parser.add(Value("c", "count", type=int))
    result = parser.parse(["--cont=3"])
    assert isinstance(result.error, UnknownArgumentError)
    assert str(result.error) == 'Unknown argument: "--cont=3". Did you mean "--count"?'


def test_unknown_argument_no_suggestion(parser):
    result = parser.parse(["--zzzzzz"])
    assert isinstance(result.error, UnknownArgumentError)
    assert str(result.error) == 'Unknown argument: "--zzzzzz".'


def test_unexpected_positional(parser):
    result = parser.parse(["stray"])
    assert isinstance(result.error, UnexpectedArgumentError)
    assert str(result.error) == 'Unexpected argument: "stray".'
    assert result.error.token.index == 0


def test_positionals_fill_in_order(parser):
    source = parser.add(Positional("source"))
    files = parser.add(MultiPositional("files", required=False))
    verbose = parser.add(Switch("v"))
    assert parser.parse(["a", "-v", "b", "c"]).ok
    assert source.value == "a"
    assert files.values == ["b", "c"]
    assert verbose.value


def test_required_positional_missing(parser):
    parser.add(Positional("source"))
    result = parser.parse([])
    assert isinstance(result.error, RequiredArgumentMissingError)
    assert str(result.error) == 'Required argument "source" was not provided.'


def test_end_of_options(parser):
    verbose = parser.add(Switch("v"))
    rest = parser.add(MultiPositional("rest"))
    assert parser.parse(["--", "-v", "--", "--help"]).ok
    assert not verbose.value
    assert rest.values == ["-v", "--", "--help"]


def test_end_of_options_disabled():
    parser = Parser("prog", end_of_options_delimiter="", output=SilentOutput())
    rest = parser.add(MultiPositional("rest"))
    result = parser.parse(["--"])
    assert isinstance(result.error, UnknownArgumentError)
    assert rest.values == []


def test_lone_prefix_is_positional(parser):
    source = parser.add(Positional("source"))
    assert parser.parse(["-"]).ok
    assert source.value == "-"


@pytest.mark.parametrize("text", ["-5", "-1.5", "-2e3"])
def test_negative_number_is_positional(parser, text):
    number = parser.add(Positional("number", type=float))
    assert parser.parse([text]).ok
    assert number.value == float(text)


def test_negative_number_as_value(parser):
    offset = parser.add(Value("o", "offset", type=int))
    assert parser.parse(["--offset", "-3"]).ok
    assert offset.value == -3


def test_registered_digit_flag_wins(parser):
    five = parser.add(Switch("5"))
    assert parser.parse(["-5"]).ok
    assert five.value


def test_choices(parser):
    mode = parser.add(Value("m", "mode", type=Choices("fast", "safe")))
    assert parser.parse(["-m", "safe"]).ok
    assert mode.value == "safe"


def test_choices_rejected(parser):
    parser.add(Value("m", "mode", type=Choices("fast", "safe")))
    result = parser.parse(["-m", "slow"])
    assert isinstance(result.error, ConversionError)
    assert str(result.error) == 'Invalid value for "-m": unable to convert "slow" into fast|safe.'


def test_first_failure_wins(parser):
    parser.add(Value("a", required=True))
    parser.add(Value("b", required=True))
    result = parser.parse(["-x", "-y"])
    assert isinstance(result.error, UnknownArgumentError)
    assert result.error.token.value == "-x"


def test_validation_in_registration_order(parser):
    parser.add(Value("a", "alpha", required=True))
    parser.add(Value("b", "beta", required=True))
    result = parser.parse([])
    assert isinstance(result.error, RequiredArgumentMissingError)
    assert result.error.argument.name == "alpha"


def test_duplicate_value_error(parser):
    parser.add(Value("c", "count", type=int))
    result = parser.parse(["-c", "1", "--count", "2"])
    assert isinstance(result.error, DuplicateArgumentError)
    assert str(result.error) == 'Argument "--count" specified multiple times.'


def test_values(parser):
    parser.add(Value("c", "count", type=int, default=1))
    parser.add(Switch("v"))
    parser.add(Positional("source", required=False))
    assert parser.parse(["-v"]).ok
    assert parser.values() == {"--count": 1, "-v": True, "source": None}


def test_duplicate_registration_leaves_registry_unchanged(parser):
    parser.add(Value("c", "count"))
    before = parser.arguments
    with pytest.raises(RegistrationConflictError):
        parser.add(Switch("x", "count"))
    with pytest.raises(RegistrationConflictError):
        parser.add(Switch("c"))
    with pytest.raises(RegistrationConflictError):
        parser.add(Switch("h"))
    assert parser.arguments == before


def test_same_argument_twice(parser):
    verbose = parser.add(Switch("v"))
    with pytest.raises(RegistrationConflictError):
        parser.add(verbose)


def test_positional_name_conflict(parser):
    parser.add(Positional("source", required=False))
    with pytest.raises(RegistrationConflictError):
        parser.add(Positional("source", required=False))


def test_positional_after_multi_positional(parser):
    parser.add(MultiPositional("files"))
    with pytest.raises(SpecificationError):
        parser.add(Positional("dest"))


def test_required_positional_after_optional(parser):
    parser.add(Positional("source", required=False))
    with pytest.raises(SpecificationError):
        parser.add(Positional("dest"))


@pytest.mark.parametrize(
    "argument",
    [
        Switch("", "a=b"),
        Switch("", "-verbose"),
        Switch("-"),
    ],
)
def test_identity_rejected(parser, argument):
    with pytest.raises(SpecificationError):
        parser.add(argument)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"delimiter": ""},
        {"delimiter": "::"},
        {"delimiter": "-"},
        {"delimiter": " "},
        {"flag_prefix": ""},
        {"name_prefix": "- -"},
    ],
)
def test_invalid_syntax(kwargs):
    with pytest.raises(SpecificationError):
        Parser("prog", **kwargs)


def test_custom_delimiter():
    parser = Parser("prog", delimiter=":", output=SilentOutput())
    count = parser.add(Value("c", "count", type=int))
    assert parser.parse(["--count:7"]).ok
    assert count.value == 7


def test_parse_once(parser):
    assert parser.parse([]).ok
    assert parser.state is State.DONE
    with pytest.raises(RuntimeError):
        parser.parse([])
    with pytest.raises(RuntimeError):
        parser.add(Switch("v"))


def test_idempotent_on_fresh_instances():
    def build():
        parser = Parser("prog", output=SilentOutput())
        parser.add(Value("c", "count", type=int))
        parser.add(MultiValue("t", "tag"))
        parser.add(Switch("v"))
        return parser

    tokens = ["-v", "-t", "a", "--count=3", "--tag", "b"]
    first, second = build(), build()
    assert first.parse(tokens).ok
    assert second.parse(tokens).ok
    assert first.values() == second.values() == {"--count": 3, "--tag": ["a", "b"], "-v": True}


def test_help_requested(parser):
    parser.add(Value("c", "count", type=int, required=True))
    result = parser.parse(["--help", "--count=abc"])
    assert result.ok
    assert result.requested == "usage"
    assert parser.state is State.DONE


def test_help_in_bundle(parser):
    parser.add(Switch("v"))
    result = parser.parse(["-vh"])
    assert result.requested == "usage"


def test_version_requested():
    parser = Parser("prog", version="2.0", output=SilentOutput())
    result = parser.parse(["--version"])
    assert result.requested == "version"


def test_output_hooks_called():
    calls = []

    class Recorder:
        def usage(self, parser):
            calls.append("usage")

        def version(self, parser):
            calls.append("version")

        def failure(self, parser, error):
            calls.append(("failure", type(error)))

    Parser("prog", output=Recorder()).parse(["-h"])
    Parser("prog", version="1", output=Recorder()).parse(["--version"])
    Parser("prog", output=Recorder()).parse(["--nope"])
    Parser("prog", output=Recorder()).parse([])
    assert calls == ["usage", "version", ("failure", UnknownArgumentError)]


def test_call_exits_on_error():
    parser = Parser("prog", output=SilentOutput())
    parser.add(Value("c", "count", type=int))
    with pytest.raises(SystemExit) as e:
        parser(["--count=abc"])
    assert e.value.code == 1


def test_call_raises_without_exit(parser):
    parser.add(Value("c", "count", type=int))
    with pytest.raises(ConversionError):
        parser(["--count=abc"])


def test_call_override_exit_on_error():
    parser = Parser("prog", output=SilentOutput())
    with pytest.raises(UnknownArgumentError):
        parser(["--nope"], exit_on_error=False)


def test_call_exits_zero_on_help(parser):
    with pytest.raises(SystemExit) as e:
        parser(["--help"])
    assert e.value.code == 0


def test_call_returns_result(parser):
    verbose = parser.add(Switch("v"))
    result = parser("-v")
    assert result.ok
    assert verbose.value


def test_bundle_matches_each_switch_once(parser):
    a = parser.add(Switch("A"))
    b = parser.add(Switch("B"))
    assert parser.parse(["-AB"]).ok
    assert a.matched_count == 1
    assert b.matched_count == 1
