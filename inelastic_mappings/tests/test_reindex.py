from unittest import mock
import datetime

from elasticsearch import exceptions
from django import test

from inelastic_mappings.exceptions import ArgumentError
from inelastic_mappings.gateway import ClusterGateway
from inelastic_mappings.reindex import (
    BATCH_SIZE,
    Reindexer,
    Slice,
    month_slices,
    parse_query,
)
from .base import FakeGateway

NOW = datetime.datetime(2026, 10, 16, 12, 30)


class MonthSlicesTestCase(test.SimpleTestCase):
    """
    Validates the partitioning of a copy into calendar months.
    """
    def setUp(self):
        super().setUp()
        self.slices = list(month_slices(now=NOW))

    def test_bounds(self):
        self.assertEqual(self.slices[0], Slice('1994-01', '1994-02'))
        self.assertEqual(self.slices[-1], Slice('2026-11', '2026-12'))
        self.assertEqual(len(self.slices), 32 * 12 + 11)

    def test_contiguous(self):
        for (previous, current) in zip(self.slices, self.slices[1:]):
            self.assertEqual(current.gte, previous.lt)
            self.assertLess(current.gte, current.lt)

    def test_every_month_in_exactly_one_slice(self):
        for date in ('1994-01-01', '1999-12-31', '2000-01-01', '2016-02-29', '2026-10-16',
                     '2026-11-15'):
            month = date[:7]
            matching = [s for s in self.slices if s.gte <= month < s.lt]
            self.assertEqual(len(matching), 1, date)

    def test_year_boundary(self):
        self.assertIn(Slice('1999-12', '2000-01'), self.slices)

    def test_lazy(self):
        slices = month_slices(now=NOW)
        self.assertEqual(next(slices), Slice('1994-01', '1994-02'))

    def test_range_query(self):
        query = Slice('2016-01', '2016-02').as_query()
        self.assertEqual(query.to_dict(),
                         {'range': {'date': {'gte': '2016-01', 'lt': '2016-02'}}})


class ParseQueryTestCase(test.SimpleTestCase):
    def test_no_query(self):
        self.assertIsNone(parse_query(None))
        self.assertIsNone(parse_query(''))

    def test_match_all(self):
        self.assertEqual(parse_query('match_all').to_dict(), {'match_all': {}})

    def test_json_query(self):
        query = parse_query('{"range":{"date":{"gte":"2016-01","lt":"2017-01"}}}')
        self.assertEqual(query.to_dict(),
                         {'range': {'date': {'gte': '2016-01', 'lt': '2017-01'}}})

    def test_malformed_json(self):
        with self.assertRaises(ArgumentError):
            parse_query('{"range": ')

    def test_invalid_clause(self):
        with self.assertRaises(ArgumentError):
            parse_query('{"range": {}, "term": {}}')
        with self.assertRaises(ArgumentError):
            parse_query('"release"')


class ReindexerTestCase(test.SimpleTestCase):
    def setUp(self):
        super().setUp()

        self.gateway = FakeGateway()
        self.gateway.create('cpan_test', {})
        self.gateway.put_alias('cpan_test', 'cpan')
        self.gateway.create('cpan_next', {})
        self.gateway.add_documents('cpan', 'release', [
            ('r1', {'name': 'Moose-2.0', 'date': '1999-12-31T10:00:00'}),
            ('r2', {'name': 'Moose-2.1', 'date': '2000-01-01T00:00:00'}),
            ('r3', {'name': 'Moo-1.0', 'date': '2016-02-29T12:00:00'}),
        ])
        self.reindexer = Reindexer(self.gateway, 'cpan')

    def test_copy_match_all(self):
        report = self.reindexer.copy('cpan_next', 'release', parse_query('match_all'))

        self.assertTrue(report.ok)
        self.assertEqual(report.documents, 3)
        self.assertEqual(self.gateway.count('cpan_next', 'release'), 3)

    def test_copy_query(self):
        query = parse_query('{"term": {"name": "Moo-1.0"}}')
        report = self.reindexer.copy('cpan_next', 'release', query)

        self.assertEqual(report.documents, 1)
        self.assertEqual(list(self.gateway.get_documents('cpan_next', 'release')), ['r3'])

    def test_copy_keeps_existing_documents(self):
        self.gateway.add_documents('cpan_next', 'release', [('r1', {'name': 'kept'})])
        self.reindexer.copy('cpan_next', 'release', parse_query('match_all'))

        documents = self.gateway.get_documents('cpan_next', 'release')
        self.assertEqual(documents['r1'], {'name': 'kept'})
        self.assertEqual(len(documents), 3)

    def test_copy_monthly(self):
        report = self.reindexer.copy('cpan_next', 'release')

        self.assertTrue(report.ok)
        self.assertEqual(report.documents, 3)
        self.assertEqual(report.slices, len(list(month_slices())))
        self.assertEqual(self.gateway.count('cpan_next', 'release'), 3)

    def test_copy_monthly_tolerates_failed_slice(self):
        def fail_january_2000(body):
            clause = body['query']['bool']['filter'][0]
            if clause['range']['date']['gte'] == '2000-01':
                raise exceptions.TransportError(500, 'search_phase_execution_exception')

        self.gateway.fail_scroll = fail_january_2000
        report = self.reindexer.copy('cpan_next', 'release')

        self.assertFalse(report.ok)
        self.assertEqual([str(f.slice) for f in report.failures], ['2000-01'])
        self.assertEqual(report.documents, 2)
        self.assertEqual(sorted(self.gateway.get_documents('cpan_next', 'release')),
                         ['r1', 'r3'])
        self.assertIn('1 of', report.summary())

    def test_copy_counts_written_documents(self):
        self.gateway.add_documents('cpan_next', 'release', [('r1', {'name': 'kept'})])
        report = self.reindexer.copy('cpan_next', 'release', parse_query('match_all'))

        self.assertTrue(report.ok)
        self.assertEqual(report.documents, 2)

    def test_copy_reports_rejected_documents(self):
        self.gateway.reject_ids = {'r2'}
        report = self.reindexer.copy('cpan_next', 'release', parse_query('match_all'))

        self.assertFalse(report.ok)
        self.assertEqual(report.documents, 2)
        self.assertEqual([str(f.slice) for f in report.failures], ['query'])
        self.assertIn('1 of 1 slices failed', report.summary())

    def test_copy_monthly_reports_rejected_documents(self):
        self.gateway.reject_ids = {'r3'}
        report = self.reindexer.copy('cpan_next', 'release')

        self.assertEqual([str(f.slice) for f in report.failures], ['2016-02'])
        self.assertEqual(report.documents, 2)
        self.assertIn('1 documents rejected', str(report.failures[0]))

    def test_empty(self):
        self.gateway.add_documents('cpan', 'file', [
            ('f{}'.format(i), {'path': 'lib/{}.pm'.format(i)}) for i in range(1200)
        ])

        deleted = self.reindexer.empty('file')

        self.assertEqual(deleted, 1200)
        self.assertEqual([len(b) for b in self.gateway.delete_batches], [500, 500, 200])
        self.assertEqual(self.gateway.count('cpan', 'file'), 0)
        # other types are untouched
        self.assertEqual(self.gateway.count('cpan', 'release'), 3)

    def test_empty_exact_batches(self):
        self.gateway.add_documents('cpan', 'file', [
            ('f{}'.format(i), {}) for i in range(BATCH_SIZE * 2)
        ])

        self.reindexer.empty('file')
        self.assertEqual([len(b) for b in self.gateway.delete_batches], [500, 500])


class BulkRejectionTestCase(test.SimpleTestCase):
    """
    Validates that documents refused by the cluster fail the copy.
    """
    def setUp(self):
        super().setUp()

        self.gateway = ClusterGateway(mock.MagicMock())
        self.reindexer = Reindexer(self.gateway, 'cpan')

    @mock.patch('inelastic_mappings.gateway.bulk')
    @mock.patch('inelastic_mappings.gateway.scan')
    def test_rejected_documents(self, scan, bulk):
        scan.return_value = iter([
            {'_id': doc_id, '_source': {'name': doc_id}} for doc_id in ('r1', 'r2', 'r3')
        ])
        bulk.return_value = (0, [
            {'create': {'_id': doc_id, 'status': 400,
                        'error': {'type': 'mapper_parsing_exception'}}}
            for doc_id in ('r1', 'r2', 'r3')
        ])

        report = self.reindexer.copy('cpan_next', 'release', parse_query('match_all'))

        self.assertFalse(report.ok)
        self.assertEqual(report.documents, 0)
        self.assertIn('3 documents rejected', str(report.failures[0]))

    @mock.patch('inelastic_mappings.gateway.bulk')
    @mock.patch('inelastic_mappings.gateway.scan')
    def test_existing_documents_are_not_failures(self, scan, bulk):
        scan.return_value = iter([{'_id': 'r1', '_source': {}}, {'_id': 'r2', '_source': {}}])
        bulk.return_value = (1, [{'create': {'_id': 'r2', 'status': 409}}])

        report = self.reindexer.copy('cpan_next', 'release', parse_query('match_all'))

        self.assertTrue(report.ok)
        self.assertEqual(report.documents, 1)
