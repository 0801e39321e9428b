"""
Filter language tests
"""
from datetime import timedelta

import pytest

from app.store.filters import matches, paginate, sort_documents
from app.store.sql_filters import FilterCompiler, column_order
from app.utils import utcnow

NOW = utcnow()

DOC = {
    'id': 'e1',
    'title': 'Robotics Workshop',
    'category': 'workshop',
    'tags': ['robots', 'lab'],
    'attendees': [{'user': 'u1'}, {'user': 'u2'}],
    'start_date': (NOW + timedelta(days=2)).isoformat(),
    'coordinates': {'latitude': 12.9716, 'longitude': 77.5946},
    'expires_at': None,
}


@pytest.mark.parametrize('flt,expected', [
    ({'category': 'workshop'}, True),
    ({'category': 'seminar'}, False),
    ({'tags': 'lab'}, True),
    ({'attendees.user': 'u2'}, True),
    ({'attendees.user': 'u3'}, False),
    ({'category': {'$ne': 'seminar'}}, True),
    ({'category': {'$in': ['seminar', 'workshop']}}, True),
    ({'category': {'$nin': ['workshop']}}, False),
    ({'title': {'$regex': 'robotics'}}, True),
    ({'start_date': {'$gte': NOW}}, True),
    ({'start_date': {'$lt': NOW}}, False),
    ({'expires_at': None}, True),
    ({'missing': {'$exists': False}}, True),
    ({'$or': [{'category': 'seminar'}, {'tags': 'robots'}]}, True),
    ({'$and': [{'category': 'workshop'}, {'tags': 'nothing'}]}, False),
])
def test_matches(flt, expected):
    assert matches(DOC, flt) is expected


def test_near_uses_meters():
    # Roughly 1.1 km north
    here = {'latitude': 12.9816, 'longitude': 77.5946}
    assert matches(DOC, {'coordinates': {'$near': {**here, 'max_distance': 2000}}})
    assert not matches(DOC, {'coordinates': {'$near': {**here, 'max_distance': 500}}})


def test_near_skips_documents_without_coordinates():
    assert not matches({'id': 'x'}, {'coordinates': {'$near': {'latitude': 0, 'longitude': 0, 'max_distance': 10}}})


def test_sort_dates_and_names():
    docs = [
        {'name': 'beta', 'start_date': (NOW + timedelta(days=3)).isoformat()},
        {'name': 'Alpha', 'start_date': (NOW + timedelta(days=1)).isoformat()},
        {'name': 'gamma', 'start_date': (NOW + timedelta(days=2)).isoformat()},
    ]
    assert [d['name'] for d in sort_documents(docs, [('start_date', 1)])] == ['Alpha', 'gamma', 'beta']
    assert [d['name'] for d in sort_documents(docs, [('name', -1)])] == ['gamma', 'beta', 'Alpha']


def test_paginate():
    docs = list(range(25))
    assert paginate(docs, 3, 10) == [20, 21, 22, 23, 24]
    assert paginate(docs, 1, None) == docs


def test_unknown_operator_raises():
    with pytest.raises(ValueError):
        matches(DOC, {'title': {'$where': 'x'}})


def test_sql_compiler_leaves_regex_and_geo_to_python():
    compiler = FilterCompiler('sqlite')
    clauses, residual = compiler.compile({
        'category': 'workshop',
        'title': {'$regex': 'robot', '$options': 'i'},
        'seats': {'$gt': 1, '$regex': '1'},
        'coordinates': {'$near': {'latitude': 0, 'longitude': 0, 'max_distance': 5}},
    })
    assert len(clauses) == 1
    assert set(residual) == {'title', 'seats', 'coordinates'}
    # The half-compiled `seats` condition leaves no parameters behind
    assert list(compiler.params) == ['f0']


def test_sql_compiler_keeps_partial_or_in_python():
    compiler = FilterCompiler('postgresql')
    flt = {'$or': [{'is_public': True}, {'title': {'$regex': 'x'}}], 'status': 'open'}
    clauses, residual = compiler.compile(flt)
    assert residual == {'$or': flt['$or']}
    assert len(clauses) == 1
    assert compiler.params == {'f0': 'open'}


def test_sql_order_only_for_timestamp_columns():
    assert column_order([('created_at', -1), ('updated_at', 1)]) == 'created_at DESC, updated_at ASC'
    assert column_order(None) == ''
    assert column_order([('start_date', 1)]) is None
