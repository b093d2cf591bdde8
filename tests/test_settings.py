import unittest
from argparse import Namespace
from datetime import datetime, timezone

import pytest

from cli import build_parser
from settings import DEFAULT_SOURCE_REPO, ConfigurationError, load_config


def _args(*argv):
    return build_parser().parse_args(list(argv))


class TestLoadConfig(unittest.TestCase):
    def test_missing_token_raises(self):
        with self.assertRaises(ConfigurationError):
            load_config(_args('--dry-run'), env={})

    def test_flag_takes_precedence_over_env(self):
        env = {'GITHUB_TOKEN': 'env-tok', 'SOURCE_REPO': 'env/repo', 'GEMINI_API_KEY': 'env-key'}
        config = load_config(_args('--github_token', 'flag-tok', '--source-repo', 'flag/repo', '--dry-run'), env=env)
        self.assertEqual(config.github_token, 'flag-tok')
        self.assertEqual(config.source_repo, 'flag/repo')
        self.assertEqual(config.gemini_api_key, 'env-key')

    def test_env_only(self):
        env = {'GITHUB_TOKEN': 'tok', 'GITHUB_REPOSITORY': 'o/current', 'DATE_OVERRIDE': '2024-01-13'}
        config = load_config(_args(), env=env)
        self.assertEqual(config.source_repo, 'o/current')
        self.assertEqual(config.target_repo, 'o/current')
        self.assertFalse(config.dry_run)
        self.assertIsNone(config.gemini_api_key)
        self.assertEqual(config.date_override, datetime(2024, 1, 13, tzinfo=timezone.utc))

    def test_default_source_repo(self):
        config = load_config(_args('--dry-run'), env={'GITHUB_TOKEN': 'tok'})
        self.assertEqual(config.source_repo, DEFAULT_SOURCE_REPO)
        self.assertIsNone(config.target_repo)

    def test_dry_run_env_values(self):
        for value, expected in (('true', True), ('YES', True), ('1', True), ('false', False)):
            env = {'GITHUB_TOKEN': 'tok', 'DRY_RUN': value, 'GITHUB_REPOSITORY': 'o/r'}
            self.assertEqual(load_config(_args(), env=env).dry_run, expected, value)

    def test_bad_date_override_raises(self):
        with self.assertRaises(ConfigurationError):
            load_config(_args('--dry-run', '--date-override', 'next tuesday'), env={'GITHUB_TOKEN': 'tok'})

    def test_live_run_requires_target(self):
        with self.assertRaises(ConfigurationError) as ctx:
            load_config(_args(), env={'GITHUB_TOKEN': 'tok'})
        self.assertIn('GITHUB_REPOSITORY', str(ctx.exception))

    def test_invalid_repo_raises(self):
        with self.assertRaises(ConfigurationError):
            load_config(_args('--dry-run', '--source-repo', 'not-a-repo'), env={'GITHUB_TOKEN': 'tok'})

    def test_unknown_preset_raises(self):
        with self.assertRaises(ConfigurationError):
            load_config(_args('--dry-run', '--preset', 'nope'), env={'GITHUB_TOKEN': 'tok'})

    def test_preset_applied(self):
        config = load_config(_args('--dry-run', '--preset', 'plain'), env={'GITHUB_TOKEN': 'tok'})
        self.assertEqual(config.policy.window_strategy, 'rolling')

    def test_plain_namespace_is_accepted(self):
        config = load_config(Namespace(github_token='tok', dry_run=True), env={})
        self.assertTrue(config.dry_run)
        self.assertEqual(config.out_file, '')


def test_misspelled_window_strategy_is_a_configuration_error(tmp_path):
    path = tmp_path / 'policy.yaml'
    path.write_text("window_strategy: weeky\n", encoding='utf-8')
    with pytest.raises(ConfigurationError) as ctx:
        load_config(_args('--dry-run', '--policy', str(path)), env={'GITHUB_TOKEN': 'tok'})
    assert 'weeky' in str(ctx.value)
