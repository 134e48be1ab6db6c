"""Tests for rewriting declarations in package.json text."""

import json

from core.update_node import update_package_data


class TestUpdatePackageData:
    """Test textual manifest patching."""

    def test_replaces_declarations(self, sample_package_json):
        current = {"express": "^4.0.0", "jest": "~29.0.0"}
        upgraded = {"express": "^5.1.0", "jest": "~29.7.0"}

        updated = update_package_data(sample_package_json, current, upgraded)

        data = json.loads(updated)
        assert data["dependencies"]["express"] == "^5.1.0"
        assert data["dependencies"]["lodash"] == "4.17.x"
        assert data["devDependencies"]["jest"] == "~29.7.0"

    def test_preserves_formatting(self, sample_package_json):
        updated = update_package_data(
            sample_package_json, {"express": "^4.0.0"}, {"express": "^5.1.0"}
        )
        assert updated == sample_package_json.replace('"^4.0.0"', '"^5.1.0"')

    def test_normalizes_spacing_of_touched_pair(self):
        content = '{"dependencies": {"react"  :   "16.0.0"}}'
        updated = update_package_data(content, {"react": "16.0.0"}, {"react": "18.2.0"})
        assert updated == '{"dependencies": {"react": "18.2.0"}}'

    def test_treats_declaration_literally(self):
        """Regex characters in names and declarations must match literally."""
        content = '{"dependencies": {"a.b": "1.x || >=2.0.0", "aXb": "1.x || >=2.0.0"}}'
        updated = update_package_data(
            content, {"a.b": "1.x || >=2.0.0"}, {"a.b": "3.x || >=3.0.0"}
        )
        assert updated == '{"dependencies": {"a.b": "3.x || >=3.0.0", "aXb": "1.x || >=2.0.0"}}'

    def test_replaces_every_occurrence(self):
        content = '{"dependencies": {"react": "16.0.0"}, "peerDependencies": {"react": "16.0.0"}}'
        updated = update_package_data(content, {"react": "16.0.0"}, {"react": "18.2.0"})
        assert updated.count('"react": "18.2.0"') == 2

    def test_leaves_unmatched_declarations(self):
        content = '{"dependencies": {"react": "^16.0.0"}}'
        updated = update_package_data(content, {"react": "16.0.0"}, {"react": "18.2.0"})
        assert updated == content

    def test_replacement_with_backslash_is_literal(self):
        content = '{"dependencies": {"react": "16.0.0"}}'
        updated = update_package_data(content, {"react": "16.0.0"}, {"react": r"\1"})
        assert updated == '{"dependencies": {"react": "\\1"}}'
