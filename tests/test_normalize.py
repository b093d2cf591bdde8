import unittest

from normalize.aggregate import aggregate, collect_contributors
from normalize.models import ActivityFetch, ISSUE, PULL_REQUEST
from normalize.util import normalize_identity, normalize_item, normalize_nodes


def _pr_node(number=1, url=None, **extra):
    node = {
        '__typename': 'PullRequest',
        'number': number,
        'title': f'PR {number}',
        'body': 'body',
        'url': url or f'https://github.com/o/r/pull/{number}',
        'state': 'MERGED',
        'createdAt': '2024-01-08T10:00:00Z',
        'updatedAt': '2024-01-10T10:00:00Z',
        'closedAt': '2024-01-10T10:00:00Z',
        'mergedAt': '2024-01-10T10:00:00Z',
        'author': {'login': 'alice', 'url': 'https://github.com/alice'},
        'comments': {'nodes': [{'author': {'login': 'bob', 'url': 'https://github.com/bob'}}, {'author': None}]},
        'reviews': {'nodes': [{'author': {'login': 'carol', 'url': 'https://github.com/carol'}}]},
    }
    node.update(extra)
    return node


def _issue_node(number=2, url=None, **extra):
    node = {
        '__typename': 'Issue',
        'number': number,
        'title': f'Issue {number}',
        'body': None,
        'url': url or f'https://github.com/o/r/issues/{number}',
        'state': 'OPEN',
        'createdAt': '2024-01-09T10:00:00Z',
        'updatedAt': '2024-01-09T11:00:00Z',
        'closedAt': None,
        'author': {'login': 'dave', 'url': 'https://github.com/dave'},
        'comments': {'nodes': [{'author': {'login': 'alice', 'url': 'https://github.com/alice'}}]},
    }
    node.update(extra)
    return node


class TestNormalize(unittest.TestCase):
    def test_normalize_pull_request(self):
        item = normalize_item(_pr_node())
        self.assertEqual(item.kind, PULL_REQUEST)
        self.assertEqual(item.number, 1)
        self.assertEqual(item.author.login, 'alice')
        self.assertEqual([c.login for c in item.commenters], ['bob'])
        self.assertEqual([r.login for r in item.reviewers], ['carol'])
        self.assertIsNotNone(item.merged_at)
        self.assertIsNone(item.ai_summary)

    def test_normalize_issue_tolerates_missing_fields(self):
        item = normalize_item(_issue_node(author=None))
        self.assertEqual(item.kind, ISSUE)
        self.assertEqual(item.body, '')
        self.assertIsNone(item.author)
        self.assertIsNone(item.closed_at)
        self.assertIsNone(item.merged_at)
        self.assertEqual(item.reviewers, ())

    def test_normalize_identity_requires_login(self):
        self.assertIsNone(normalize_identity({'login': '', 'url': 'x'}))
        self.assertIsNone(normalize_identity(None))

    def test_unknown_nodes_are_skipped(self):
        items = normalize_nodes([{'__typename': 'Discussion'}, {}, _pr_node()])
        self.assertEqual(len(items), 1)


class TestAggregate(unittest.TestCase):
    def test_duplicate_urls_are_stored_once(self):
        shared = 'https://github.com/o/r/pull/7'
        prs = normalize_nodes([_pr_node(7, url=shared), _pr_node(8)])
        issues = normalize_nodes([_issue_node(7, url=shared), _issue_node(9)])
        result = aggregate(ActivityFetch(pull_requests=prs, issues=issues))
        urls = [it.url for it in result.pull_requests + result.issues]
        self.assertEqual(urls.count(shared), 1)
        self.assertEqual(len(urls), 3)
        # the pull request entry wins
        self.assertIn(shared, [pr.url for pr in result.pull_requests])

    def test_contributors_cover_authors_commenters_reviewers_once(self):
        items = normalize_nodes([_pr_node(1), _issue_node(2)])
        contributors = collect_contributors(items)
        self.assertEqual(sorted(contributors), ['alice', 'bob', 'carol', 'dave'])
        self.assertEqual(contributors['carol'], 'https://github.com/carol')

    def test_empty_fetch(self):
        result = aggregate(ActivityFetch())
        self.assertTrue(result.is_empty)
        self.assertEqual(result.contributors, {})


if __name__ == '__main__':
    unittest.main()
