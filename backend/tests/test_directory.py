"""
Directory view endpoints: tabs, search, sort criteria edits and paging,
driven through the HTTP API against a fresh copy of the demo data.
"""
import json
import shutil

from starlette.testclient import TestClient

from conftest import FailingStore
from dirlib.criteria import STORAGE_KEY


def names(view):
    return [e['employee_name'] for e in view['pagination']['items']]


def fields(view):
    return [c['field'] for c in view['sort_criteria']]


class TestDefaultView:
    def test_first_page(self, client: TestClient):
        res = client.get('/api/directory')
        assert res.status_code == 200
        view = res.json()
        assert view['error'] is None
        assert view['active_tab'] == 'all'
        pagination = view['pagination']
        assert pagination['total_items'] == 18
        assert pagination['total_pages'] == 3
        assert pagination['current_page'] == 1
        assert len(pagination['items']) == 7
        assert names(view)[0] == 'Alice Johnson'

    def test_default_criteria(self, client: TestClient):
        view = client.get('/api/directory').json()
        assert fields(view) == [
            'employee_name', 'createdAt', 'employee_salary', 'employee_age',
            'employeeType', 'email', 'updatedAt',
        ]
        assert view['available_fields'] == []
        assert view['active_filters'] == 1

    def test_rows_carry_display_values(self, client: TestClient):
        row = client.get('/api/directory').json()['pagination']['items'][0]
        assert row['salary_display'] == '$72,000'
        assert row['created_display'] == 'Jan 15, 2024'


class TestTabsAndSearch:
    def test_company_tab(self, client: TestClient):
        view = client.put('/api/directory/tab', json={'tab': 'company'}).json()
        assert view['pagination']['total_items'] == 9
        assert all(e['employeeType'] == 'Company' for e in view['pagination']['items'])
        assert view['active_filters'] == 2

    def test_tab_change_resets_page(self, client: TestClient):
        client.put('/api/directory/page', json={'page': 3})
        view = client.put('/api/directory/tab', json={'tab': 'individual'}).json()
        assert view['pagination']['current_page'] == 1

    def test_search_immediate(self, client: TestClient):
        view = client.put('/api/directory/search',
                          json={'term': 'GLOBEX', 'immediate': True}).json()
        assert view['debounced_search_term'] == 'GLOBEX'
        assert sorted(names(view)) == ['Eve Martinez', 'Irene Novak', 'Oscar Nilsson']

    def test_search_settles_on_next_view(self, client: TestClient):
        # Search delay is zero under test, so the next render applies the term.
        client.put('/api/directory/search', json={'term': 'acme'})
        view = client.get('/api/directory').json()
        assert view['search_pending'] is False
        assert sorted(names(view)) == ['Bob Smith', 'Charlie Brown', 'Maria Rossi']

    def test_tab_and_search_combine(self, client: TestClient):
        client.put('/api/directory/tab', json={'tab': 'individual'})
        view = client.put('/api/directory/search',
                          json={'term': 'example', 'immediate': True}).json()
        assert view['pagination']['total_items'] == 9
        assert view['active_filters'] == 3

    def test_no_matches(self, client: TestClient):
        view = client.put('/api/directory/search',
                          json={'term': 'zzzz', 'immediate': True}).json()
        assert view['pagination']['items'] == []
        assert view['pagination']['total_pages'] == 0


class TestSortCriteria:
    def test_clear_keeps_file_order(self, client: TestClient):
        view = client.delete('/api/directory/sort').json()
        assert view['sort_criteria'] == []
        assert [e['id'] for e in view['pagination']['items']] == ['1', '2', '3', '4', '5', '6', '7']
        assert len(view['available_fields']) == 7

    def test_add_then_flip_direction(self, client: TestClient):
        client.delete('/api/directory/sort')
        view = client.post('/api/directory/sort', json={'field': 'employee_salary'}).json()
        assert view['sort_criteria'] == [{
            'field': 'employee_salary', 'direction': 'asc',
            'icon': 'DollarSign', 'label': '↑ Low to High',
        }]
        assert names(view)[0] == 'Charlie Brown'
        view = client.patch('/api/directory/sort/0', json={'direction': 'desc'}).json()
        assert names(view)[:3] == ['Priya Patel', 'Irene Novak', 'Grace Kim']

    def test_missing_ages_sort_last_both_ways(self, client: TestClient):
        client.delete('/api/directory/sort')
        client.post('/api/directory/sort', json={'field': 'employee_age'})
        view = client.put('/api/directory/page', json={'page': 3}).json()
        assert names(view) == ['Frank Wright', 'David Lee', 'Irene Novak', 'Oscar Nilsson']
        client.patch('/api/directory/sort/0', json={'direction': 'desc'})
        first = client.get('/api/directory').json()
        assert names(first)[0] == 'Frank Wright'
        last = client.put('/api/directory/page', json={'page': 3}).json()
        assert names(last)[-3:] == ['David Lee', 'Irene Novak', 'Oscar Nilsson']

    def test_cascade_breaks_ties(self, client: TestClient):
        # Charlie Brown and David Lee share a createdAt timestamp.
        client.delete('/api/directory/sort')
        client.post('/api/directory/sort', json={'field': 'createdAt'})
        client.patch('/api/directory/sort/0', json={'direction': 'desc'})
        client.post('/api/directory/sort', json={'field': 'employee_salary'})
        view = client.patch('/api/directory/sort/1', json={'direction': 'desc'}).json()
        assert fields(view) == ['createdAt', 'employee_salary']
        assert names(view)[:4] == ['Quentin Dubois', 'Eve Martinez', 'David Lee', 'Charlie Brown']
        view = client.patch('/api/directory/sort/1', json={'direction': 'asc'}).json()
        assert names(view)[2:4] == ['Charlie Brown', 'David Lee']

    def test_oldest_first_ascending(self, client: TestClient):
        client.delete('/api/directory/sort')
        view = client.post('/api/directory/sort', json={'field': 'createdAt'}).json()
        assert names(view)[0] == 'Priya Patel'

    def test_duplicate_field_conflict(self, client: TestClient):
        res = client.post('/api/directory/sort', json={'field': 'employee_name'})
        assert res.status_code == 409
        view = client.get('/api/directory').json()
        assert fields(view).count('employee_name') == 1

    def test_unknown_field(self, client: TestClient):
        res = client.post('/api/directory/sort', json={'field': 'shoe_size'})
        assert res.status_code == 400

    def test_bad_index(self, client: TestClient):
        assert client.patch('/api/directory/sort/99', json={'direction': 'asc'}).status_code == 400
        assert client.delete('/api/directory/sort/99').status_code == 400

    def test_bad_direction(self, client: TestClient):
        res = client.patch('/api/directory/sort/0', json={'direction': 'sideways'})
        assert res.status_code == 400

    def test_non_integer_index(self, client: TestClient):
        res = client.delete('/api/directory/sort/abc')
        assert res.status_code == 422
        assert res.json()['detail'] == 'index: must be an integer'

    def test_remove(self, client: TestClient):
        view = client.delete('/api/directory/sort/0').json()
        assert fields(view)[0] == 'createdAt'
        assert view['available_fields'] == ['employee_name']

    def test_reorder(self, client: TestClient):
        current = client.get('/api/directory').json()['sort_criteria']
        new_order = [{'field': c['field'], 'direction': c['direction']} for c in reversed(current)]
        view = client.put('/api/directory/sort', json={'criteria': new_order}).json()
        assert fields(view) == [c['field'] for c in new_order]

    def test_reorder_rejects_non_permutation(self, client: TestClient):
        res = client.put('/api/directory/sort', json={
            'criteria': [{'field': 'email', 'direction': 'asc'}],
        })
        assert res.status_code == 400

    def test_move(self, client: TestClient):
        view = client.post('/api/directory/sort/move',
                           json={'old_index': 0, 'new_index': 6}).json()
        assert fields(view)[0] == 'createdAt'
        assert fields(view)[-1] == 'employee_name'

    def test_reset(self, client: TestClient):
        client.delete('/api/directory/sort')
        view = client.post('/api/directory/sort/reset').json()
        assert len(view['sort_criteria']) == 7

    def test_sort_change_resets_page(self, client: TestClient):
        client.put('/api/directory/page', json={'page': 2})
        view = client.patch('/api/directory/sort/0', json={'direction': 'desc'}).json()
        assert view['pagination']['current_page'] == 1


class TestPersistence:
    def test_criteria_written_to_state_file(self, client: TestClient, state_path):
        client.delete('/api/directory/sort')
        client.post('/api/directory/sort', json={'field': 'email'})
        with open(state_path, encoding='utf-8') as f:
            state = json.load(f)
        assert json.loads(state[STORAGE_KEY]) == [{'field': 'email', 'direction': 'asc'}]

    def test_criteria_survive_restart(self, client: TestClient):
        from api.dependencies import reset_controller
        client.delete('/api/directory/sort')
        client.post('/api/directory/sort', json={'field': 'updatedAt'})
        client.patch('/api/directory/sort/0', json={'direction': 'desc'})
        reset_controller()
        view = client.get('/api/directory').json()
        assert [(c['field'], c['direction']) for c in view['sort_criteria']] == [('updatedAt', 'desc')]

    def test_corrupt_state_falls_back_to_defaults(self, client: TestClient, state_path):
        from api.dependencies import reset_controller
        client.delete('/api/directory/sort')
        with open(state_path, 'w', encoding='utf-8') as f:
            json.dump({STORAGE_KEY: 'not json'}, f)
        reset_controller()
        view = client.get('/api/directory').json()
        assert len(view['sort_criteria']) == 7


class TestPaging:
    def test_last_page(self, client: TestClient):
        view = client.put('/api/directory/page', json={'page': 3}).json()
        pagination = view['pagination']
        assert pagination['current_page'] == 3
        assert len(pagination['items']) == 4
        assert pagination['start_item'] == 14
        assert pagination['end_item'] == 18

    def test_page_is_clamped(self, client: TestClient):
        view = client.put('/api/directory/page', json={'page': 99}).json()
        assert view['pagination']['current_page'] == 3

    def test_page_must_be_integer(self, client: TestClient):
        res = client.put('/api/directory/page', json={'page': 'two'})
        assert res.status_code == 422
        assert res.json()['detail'] == 'page: must be an integer'


class TestStateStoreFailure:
    def test_failed_write_returns_500_and_keeps_state(self, client: TestClient, monkeypatch):
        from api.dependencies import reset_controller
        before = client.get('/api/directory').json()
        monkeypatch.setattr('api.dependencies.get_store', lambda: FailingStore())
        reset_controller()

        res = client.delete('/api/directory/sort')
        assert res.status_code == 500
        assert res.json() == {'detail': 'Internal server error. Please try again.'}
        res = client.patch('/api/directory/sort/0', json={'direction': 'desc'})
        assert res.status_code == 500

        view = client.get('/api/directory').json()
        assert view['sort_criteria'] == before['sort_criteria']
        assert names(view) == names(before)


class TestTabs:
    def test_tabs_in_display_order(self, client: TestClient):
        res = client.get('/api/directory/tabs')
        assert res.status_code == 200
        assert res.json() == [
            {'value': 'all', 'label': 'All'},
            {'value': 'individual', 'label': 'Individual'},
            {'value': 'company', 'label': 'Company'},
        ]


class TestFetchError:
    def test_error_view(self, broken_client: TestClient):
        res = broken_client.get('/api/directory')
        assert res.status_code == 503
        assert res.json() == {
            'error': 'Failed to fetch employees data',
            'loading': False,
            'retry': '/api/directory/reload',
        }

    def test_reload_after_data_appears(self, broken_client: TestClient, tmp_path, demo_employees):
        assert broken_client.get('/api/directory').status_code == 503
        with open(tmp_path / 'missing.json', 'w', encoding='utf-8') as f:
            json.dump({'employees': demo_employees}, f)
        res = broken_client.post('/api/directory/reload')
        assert res.status_code == 200
        assert res.json()['pagination']['total_items'] == 18

    def test_error_is_sticky_without_reload(self, broken_client: TestClient, tmp_path, data_path):
        broken_client.get('/api/directory')
        shutil.copyfile(data_path, str(tmp_path / 'missing.json'))
        assert broken_client.get('/api/directory').status_code == 503
