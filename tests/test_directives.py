import pytest

from selectserv.config_tree import ConfigSyntaxError, parse_config_text
from selectserv.directives import (
    DEFAULT_PORT,
    INVALID_MESSAGE,
    LOCALHOST,
    USAGE,
    DirectiveRule,
    ErrorPage,
    InvalidDirectiveError,
    Listen,
    check_directive,
    default_rules,
    main,
    validate_config_file,
    validate_tree,
)

VALID = """
server {
    listen 80;
    location / {
        index index.html;
    }
}
"""


def test_rule_depth_bounds_are_exclusive():
    rule = DirectiveRule(2, 4, ("server",))
    assert rule.is_valid(3, "server")
    assert not rule.is_valid(2, "server")
    assert not rule.is_valid(4, "server")


def test_rule_requires_listed_parent():
    rule = DirectiveRule(2, 6, ("server", "location"))
    assert rule.is_valid(5, "location")
    assert not rule.is_valid(5, "listen")
    assert not rule.is_valid(5, None)


def test_rule_without_parents_is_top_level_only():
    rule = DirectiveRule(0, 2)
    assert rule.is_valid(1, None)
    assert not rule.is_valid(1, "server")


def test_default_rules_contents():
    rules = default_rules()
    assert rules["server"] == [DirectiveRule(0, 2, ())]
    assert rules["listen"] == [DirectiveRule(2, 4, ("server",))]
    assert rules["location"] == [DirectiveRule(2, 6, ("server",))]
    assert rules["cgi_pass"] == [DirectiveRule(2, 6, ("server", "location"))]
    assert set(rules) == {
        "server", "listen", "server_name", "location", "index", "root",
        "autoindex", "error_page", "method", "client_max_body_size", "cgi", "cgi_pass",
    }


def test_validate_tree_visits_in_order():
    root = parse_config_text(VALID)
    assert validate_tree(root) == ["server", "listen", "location", "index"]


def test_repeated_server_checked_per_occurrence():
    root = parse_config_text("server {\n listen 80;\n}\nserver {\n listen 81;\n}\n")
    assert validate_tree(root).count("server") == 2


def test_unknown_directive_rejected():
    root = parse_config_text("server {\n bogus 1;\n}\n")
    with pytest.raises(InvalidDirectiveError) as info:
        validate_tree(root)
    assert info.value.name == "bogus"


def test_listen_at_top_level_rejected():
    root = parse_config_text("listen 80;\n")
    with pytest.raises(InvalidDirectiveError) as info:
        validate_tree(root)
    assert info.value.parent is None


def test_nested_server_rejected():
    root = parse_config_text("server {\n server {\n }\n}\n")
    with pytest.raises(InvalidDirectiveError) as info:
        validate_tree(root)
    assert info.value.parent == "server"


def test_location_inside_location_rejected():
    root = parse_config_text("server {\n location / {\n location /a {\n }\n }\n}\n")
    with pytest.raises(InvalidDirectiveError) as info:
        validate_tree(root)
    assert info.value.name == "location"
    assert info.value.parent == "location"


def test_check_directive_uses_given_rules():
    root = parse_config_text("custom 1;\n")
    entry = root.direct_children_map()[";custom;1"]
    check_directive(entry, {"custom": [DirectiveRule(0, 2)]})
    with pytest.raises(InvalidDirectiveError):
        check_directive(entry, default_rules())


def test_listen_defaults():
    listen = Listen()
    assert listen.address == LOCALHOST
    assert listen.port == DEFAULT_PORT == 8080
    assert listen.default_server == ""
    assert listen.host == "127.0.0.1"


def test_error_page_defaults_are_independent():
    first, second = ErrorPage(), ErrorPage("/404.html")
    first.error_codes.append(404)
    assert second.error_codes == []
    assert second.uri == "/404.html"


def test_validate_config_file(tmp_path):
    path = tmp_path / "ok.conf"
    path.write_text(VALID)
    root = validate_config_file(path)
    assert list(root.direct_children_map()) == [";server"]


def test_validate_config_file_syntax_error(tmp_path):
    path = tmp_path / "bad.conf"
    path.write_text("server {\n listen 80;\n")
    with pytest.raises(ConfigSyntaxError):
        validate_config_file(path)


def test_validate_config_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        validate_config_file(tmp_path / "absent.conf")


def test_main_valid(tmp_path, capsys):
    path = tmp_path / "ok.conf"
    path.write_text(VALID)
    assert main([str(path)]) == 0
    assert "listen 80;" in capsys.readouterr().out


def test_main_invalid(tmp_path, capsys):
    path = tmp_path / "bad.conf"
    path.write_text("listen 80;\n")
    assert main([str(path)]) == 1
    assert INVALID_MESSAGE in capsys.readouterr().out


def test_main_too_many_arguments(capsys):
    assert main(["a", "b"]) == 0
    assert USAGE in capsys.readouterr().out