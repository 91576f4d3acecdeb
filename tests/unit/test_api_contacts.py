"""
Unit tests for the contacts endpoints (partnerdb/api/contacts.py).

The store module is patched where the router imported it
(partnerdb.api.contacts.contact_store); the TestClient is used without its
context manager so the lifespan hook (log file setup) does not run.
"""

import pytest
from unittest.mock import patch

from fastapi.testclient import TestClient

from partnerdb.api.main import app
from partnerdb.errors import DuplicateKeyError, NotFoundError, StoreError, ValidationError
from partnerdb.models import CategoryType, Contact, Staff


SAMPLE = Contact(
    id='c1', category=CategoryType.SALES, brand_name='맛있는 식당', industry='요식업',
    staff_list=[Staff(id='s1', name='박사장', department='영업팀')],
)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def store():
    with patch('partnerdb.api.contacts.contact_store') as mock_store:
        mock_store.mutable_fields.side_effect = lambda c: {'brand_name': c.brand_name, 'staff_list': c.staff_list}
        yield mock_store


# ---------------------------------------------------------------------------
# GET
# ---------------------------------------------------------------------------

def test_list_all(client, store):
    store.list_contacts.return_value = [SAMPLE]
    resp = client.get('/api/contacts')
    assert resp.status_code == 200
    body = resp.json()
    assert body['success'] is True
    assert body['data'][0]['brandName'] == '맛있는 식당'
    assert body['data'][0]['staffList'] == [{'id': 's1', 'name': '박사장', 'department': '영업팀'}]
    store.list_contacts.assert_called_once_with(None)


def test_list_by_category(client, store):
    store.list_contacts.return_value = []
    resp = client.get('/api/contacts', params={'category': 'OUTSOURCE'})
    assert resp.json() == {'success': True, 'data': []}
    store.list_contacts.assert_called_once_with(CategoryType.OUTSOURCE)


def test_list_unknown_category_is_400(client, store):
    resp = client.get('/api/contacts', params={'category': 'SUPPLIER'})
    assert resp.status_code == 400
    assert resp.json() == {'success': False, 'error': 'Unknown category: SUPPLIER'}
    store.list_contacts.assert_not_called()


def test_get_one(client, store):
    store.get_contact.return_value = SAMPLE
    resp = client.get('/api/contacts/c1')
    assert resp.json()['data']['id'] == 'c1'
    assert resp.json()['data']['category'] == 'SALES'


def test_get_missing_is_404(client, store):
    store.get_contact.side_effect = NotFoundError('Contact c404 not found')
    resp = client.get('/api/contacts/c404')
    assert resp.status_code == 404
    assert resp.json() == {'success': False, 'error': 'Contact c404 not found'}


def test_search_by_brand_name(client, store):
    store.find_by_brand_name.return_value = SAMPLE
    resp = client.get('/api/contacts/search', params={'name': '맛있는 식당'})
    assert resp.json()['data']['id'] == 'c1'
    store.find_by_brand_name.assert_called_once_with('맛있는 식당')


def test_search_no_match_returns_null(client, store):
    store.find_by_brand_name.return_value = None
    resp = client.get('/api/contacts/search', params={'name': '없음'})
    assert resp.json() == {'success': True, 'data': None}


def test_search_requires_name(client, store):
    assert client.get('/api/contacts/search').status_code == 400


# ---------------------------------------------------------------------------
# POST
# ---------------------------------------------------------------------------

def test_create(client, store):
    store.create_contact.return_value = SAMPLE
    resp = client.post('/api/contacts', json={
        'id': 'c1', 'category': 'SALES', 'brandName': '맛있는 식당',
        'staffList': [{'name': '박사장', 'department': '영업팀'}],
    })
    assert resp.status_code == 201
    assert resp.json() == {'success': True, 'data': {'id': 'c1'}}
    created = store.create_contact.call_args[0][0]
    assert created.category is CategoryType.SALES
    assert created.staff_list[0].name == '박사장'


def test_create_requires_category(client, store):
    resp = client.post('/api/contacts', json={'brandName': 'x'})
    assert resp.status_code == 400
    assert resp.json()['error'] == 'category is required'


def test_create_unknown_category(client, store):
    resp = client.post('/api/contacts', json={'category': 'NOPE'})
    assert resp.status_code == 400
    store.create_contact.assert_not_called()


def test_create_duplicate_is_409(client, store):
    store.create_contact.side_effect = DuplicateKeyError('Contact c1 already exists')
    resp = client.post('/api/contacts', json={'id': 'c1', 'category': 'SALES'})
    assert resp.status_code == 409


def test_create_staff_validation_is_400(client, store):
    store.create_contact.side_effect = ValidationError('Staff #1: name is required')
    resp = client.post('/api/contacts', json={'category': 'SALES', 'staffList': [{'name': ''}]})
    assert resp.status_code == 400
    assert resp.json()['error'] == 'Staff #1: name is required'


def test_non_object_body_is_400(client, store):
    resp = client.post('/api/contacts', json=['not', 'an', 'object'])
    assert resp.status_code == 400
    assert resp.json()['success'] is False


# ---------------------------------------------------------------------------
# PUT / DELETE
# ---------------------------------------------------------------------------

def test_update_ignores_category(client, store):
    store.update_contact.return_value = SAMPLE
    resp = client.put('/api/contacts/c1', json={'category': 'GEOSANG', 'brandName': '새 이름'})
    assert resp.json() == {'success': True}
    contact_id, updates = store.update_contact.call_args[0]
    assert contact_id == 'c1'
    assert updates['brand_name'] == '새 이름'
    assert 'category' not in updates


def test_update_missing_is_404(client, store):
    store.update_contact.side_effect = NotFoundError('Contact c404 not found')
    assert client.put('/api/contacts/c404', json={'brandName': 'x'}).status_code == 404


def test_delete(client, store):
    store.delete_contact.return_value = False
    resp = client.delete('/api/contacts/c404')
    assert resp.json() == {'success': True}
    store.delete_contact.assert_called_once_with('c404')


def test_store_failure_is_500_envelope(client, store):
    store.list_contacts.side_effect = StoreError('Database error: connection refused')
    resp = client.get('/api/contacts')
    assert resp.status_code == 500
    assert resp.json() == {'success': False, 'error': 'Database error: connection refused'}


def test_unexpected_exception_is_generic_500(store):
    store.list_contacts.side_effect = KeyError('boom')
    resp = TestClient(app, raise_server_exceptions=False).get('/api/contacts')
    assert resp.status_code == 500
    assert resp.json() == {'success': False, 'error': 'Internal server error'}
