"""
Bulk copy and purge of the documents of one type.

Documents are read with a scroll and written with bulk requests. Copies
without an explicit query are partitioned into calendar months, each
month copied on its own so that a failing month does not abort the rest.
"""
from collections import namedtuple
import datetime
import logging
import json

from dateutil.relativedelta import relativedelta
from elasticsearch_dsl.exceptions import UnknownDslObject
from elasticsearch import exceptions
import elasticsearch_dsl as dsl

from .exceptions import ArgumentError, SliceFailure

logger = logging.getLogger(__name__)

SCROLL_SIZE = 250
SCROLL_TTL = '10m'
BATCH_SIZE = 500

EPOCH = datetime.datetime(1994, 1, 1)
DATE_FIELD = 'date'
MATCH_ALL = 'match_all'
# label of the single slice of a copy restricted by a query
QUERY_SLICE = 'query'


class Slice(namedtuple('Slice', ['gte', 'lt'])):
    """
    The half-open month interval '[gte, lt)', as 'YYYY-MM' strings.
    """
    __slots__ = ()

    def __str__(self):
        return self.gte

    def as_query(self, field=DATE_FIELD):
        return dsl.Q('range', **{field: {'gte': self.gte, 'lt': self.lt}})


def month_slices(now=None, epoch=EPOCH):
    """
    Yields consecutive month slices from 'epoch' until one month past 'now'.
    """
    end = (now or datetime.datetime.now()) + relativedelta(months=1)
    month = datetime.datetime(epoch.year, epoch.month, 1)

    while month < end:
        upper = month + relativedelta(months=1)
        yield Slice(month.strftime('%Y-%m'), upper.strftime('%Y-%m'))
        month = upper


def parse_query(query):
    """
    Translates a copy query argument into a query object.

    Returns None when no query is given; 'match_all' selects every document,
    anything else must be the JSON of a single query clause.
    """
    if query is None or query == '':
        return None
    if query == MATCH_ALL:
        return dsl.Q(MATCH_ALL)

    if isinstance(query, str):
        try:
            query = json.loads(query)
        except ValueError as exc:
            raise ArgumentError("Malformed copy query: {!s}".format(exc))

    try:
        return dsl.Q(query)
    except (ValueError, TypeError, UnknownDslObject) as exc:
        raise ArgumentError("Invalid copy query '{}': {!s}".format(query, exc))


class CopyReport:
    def __init__(self):
        self.documents = 0
        self.slices = 0
        self.failures = []

    def __repr__(self):
        return "<CopyReport: {}>".format(self.summary())

    @property
    def ok(self):
        return not self.failures

    def summary(self):
        msg = "{} documents copied".format(self.documents)
        if self.failures:
            msg += ", {} of {} slices failed ({})".format(
                len(self.failures), self.slices,
                ", ".join(str(f.slice) for f in self.failures)
            )
        return msg


class Reindexer:
    def __init__(self, gateway, source_index, date_field=DATE_FIELD):
        self.gateway = gateway
        self.source_index = source_index
        self.date_field = date_field

    def get_body(self, query):
        return dsl.Search().filter(query).to_dict()

    def copy_slice(self, query, index, doc_type):
        """
        Copies the documents matching 'query' into 'index' under their ids.

        Documents already present in the destination are left untouched.
        Returns the number of documents written and the number rejected.
        """
        writer = self.gateway.bulk(index, doc_type, BATCH_SIZE)
        scroll = self.gateway.scroll(
            self.source_index, doc_type, self.get_body(query), SCROLL_SIZE, SCROLL_TTL
        )

        for hit in scroll:
            writer.create(hit['_id'], hit['_source'])
        writer.flush()

        return (writer.succeeded, writer.rejected)

    def _copy_into(self, report, label, query, index, doc_type):
        report.slices += 1
        (copied, rejected) = self.copy_slice(query, index, doc_type)
        report.documents += copied

        if rejected:
            self._record_failure(report, label, "{} documents rejected".format(rejected))

    def _record_failure(self, report, label, cause):
        failure = SliceFailure(label, cause)
        logger.warning(str(failure))
        report.failures.append(failure)

    def copy(self, index, doc_type, query=None):
        report = CopyReport()

        if query is not None:
            logger.info("Copying '{}' to '{}' matching {}".format(
                doc_type, index, query.to_dict()))
            self._copy_into(report, QUERY_SLICE, query, index, doc_type)
            return report

        for month in month_slices():
            logger.info("copying data for month: {}".format(month))
            try:
                self._copy_into(report, month, month.as_query(self.date_field),
                                index, doc_type)
            except (exceptions.ElasticsearchException, ValueError) as exc:
                self._record_failure(report, month, exc)

        return report

    def empty(self, doc_type):
        """
        Deletes every document of 'doc_type' from the source index.

        Returns the number of documents deleted.
        """
        writer = self.gateway.bulk(self.source_index, doc_type, BATCH_SIZE)
        scroll = self.gateway.scroll(
            self.source_index, doc_type, self.get_body(dsl.Q(MATCH_ALL)),
            SCROLL_SIZE, SCROLL_TTL
        )

        ids = []
        for hit in scroll:
            logger.debug("deleting id={}".format(hit['_id']))
            ids.append(hit['_id'])
            if len(ids) == BATCH_SIZE:
                writer.delete_ids(ids)
                ids = []

        if ids:
            writer.delete_ids(ids)
        writer.flush()

        if writer.rejected:
            logger.warning("{} documents of type {} could not be deleted".format(
                writer.rejected, doc_type))
        return writer.succeeded
