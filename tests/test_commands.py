import pytest

from termslides.commands import Command, CommandKind


def test_go_to_slide_carries_slide():
    command = Command.go_to_slide(7)
    assert command.kind is CommandKind.GO_TO_SLIDE
    assert command.slide == 7


def test_plain_command_has_no_slide():
    command = Command(CommandKind.NEXT)
    assert command.slide is None
    assert command == Command(CommandKind.NEXT)


def test_commands_compare_by_value():
    assert Command.go_to_slide(3) == Command.go_to_slide(3)
    assert Command.go_to_slide(3) != Command.go_to_slide(4)
    assert Command(CommandKind.EXIT) != Command(CommandKind.NEXT)


def test_go_to_slide_requires_slide():
    with pytest.raises(ValueError):
        Command(CommandKind.GO_TO_SLIDE)


def test_other_commands_reject_slide():
    with pytest.raises(ValueError):
        Command(CommandKind.NEXT, 3)


def test_negative_slide_rejected():
    with pytest.raises(ValueError):
        Command.go_to_slide(-1)


def test_kind_lookup_by_name():
    assert CommandKind("GoToSlide") is CommandKind.GO_TO_SLIDE
    assert CommandKind("Exit") is CommandKind.EXIT


@pytest.mark.parametrize(
    "kind", [kind for kind in CommandKind if kind is not CommandKind.GO_TO_SLIDE]
)
def test_every_plain_kind_builds_a_distinct_command(kind):
    command = Command(CommandKind(kind.value))
    assert command.kind is kind
    assert command.slide is None
    others = [
        Command(other)
        for other in CommandKind
        if other is not kind and other is not CommandKind.GO_TO_SLIDE
    ]
    assert all(command != other for other in others)