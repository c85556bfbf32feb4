from app.services.reminders.template_renderer import render_template


def test_replaces_known_placeholders():
    message = render_template(
        "Hello {$name}, your appointment is at {$time}.",
        {"name": "Mario", "time": "10:00 AM"},
    )

    assert message == "Hello Mario, your appointment is at 10:00 AM."


def test_unknown_placeholder_is_left_as_is():
    assert render_template("See you in {$days}, {$name}", {"name": "Mario"}) == "See you in {$days}, Mario"


def test_none_value_is_left_as_is():
    assert render_template("Hi {$name}", {"name": None}) == "Hi {$name}"


def test_repeated_placeholder_and_non_string_values():
    assert render_template("{$n} + {$n} = {$sum}", {"n": 2, "sum": 4}) == "2 + 2 = 4"


def test_other_brace_styles_are_untouched():
    template = "Hi {name} {{$name}} ${name}"

    assert render_template(template, {"name": "Mario"}) == "Hi {name} {Mario} ${name}"


def test_template_without_placeholders_is_unchanged():
    assert render_template("See you tomorrow!", {"name": "Mario"}) == "See you tomorrow!"


def test_adjacent_placeholders():
    assert render_template("{$a}{$b}", {"a": "x", "b": "y"}) == "xy"


def test_unclosed_placeholder_is_left_as_is():
    assert render_template("Hi {$name", {"name": "Mario"}) == "Hi {$name"
