"""
Purchase & Sale ledger tests.

Running totals:
    sale     -> balance +amount, tins -tins
    purchase -> balance -amount, tins +tins
    expense  -> balance -amount
"""

from decimal import Decimal

from fleet_ledger.models.purchase_sale import PurchaseSale
from fleet_ledger.services import purchase_sale_service
from tests.conftest import API


def get_ledger(client, headers, ledger_id):
    response = client.get(f"{API}/purchase-sales/{ledger_id}", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def assert_totals(ledger, balance, tins):
    assert Decimal(ledger['current_balance']) == Decimal(balance)
    assert ledger['current_tins'] == tins


class TestLedgerCreate:

    def test_starts_at_opening_balance(self, client, auth_headers, make_branch, make_vehicle, make_ledger):
        branch = make_branch()
        vehicle = make_vehicle(vehicle_name='Tanker 5', branch_id=branch['id'])
        ledger = make_ledger(opening_balance='1000', vehicle=vehicle)

        assert ledger['id'].startswith('PS-')
        assert_totals(ledger, '1000', 0)
        assert ledger['completed'] is False
        assert ledger['vehicle_name'] == 'Tanker 5'
        assert ledger['branch_id'] == branch['id']

    def test_unknown_vehicle(self, client, auth_headers):
        response = client.post(
            f"{API}/purchase-sales",
            json={'date': '2024-05-01', 'vehicle_id': 'VEH-MISSING0', 'opening_balance': '10'},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json()['message'] == 'Vehicle not found'

    def test_negative_opening_balance(self, client, auth_headers, make_vehicle):
        vehicle = make_vehicle()
        response = client.post(
            f"{API}/purchase-sales",
            json={'date': '2024-05-01', 'vehicle_id': vehicle['id'], 'opening_balance': '-1'},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_list_filters(self, client, auth_headers, make_vehicle, make_ledger):
        vehicle = make_vehicle()
        make_ledger(vehicle=vehicle, date='2024-05-01')
        make_ledger(date='2024-05-03')

        data = client.get(f"{API}/purchase-sales", headers=auth_headers).json()
        assert data['total'] == 2
        assert [row['date'] for row in data['purchase_sales']] == ['2024-05-03', '2024-05-01']

        data = client.get(
            f"{API}/purchase-sales", params={'vehicle_id': vehicle['id']}, headers=auth_headers
        ).json()
        assert data['total'] == 1

        data = client.get(f"{API}/purchase-sales", params={'completed': True}, headers=auth_headers).json()
        assert data['total'] == 0


class TestTransactions:

    def test_running_totals(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')

        response = add_transaction(ledger['id'], type='purchase', amount='400', tins=10)
        assert response.status_code == 201
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '600', 10)

        add_transaction(ledger['id'], type='sale', amount='300', tins=4)
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '900', 6)

        response = add_transaction(ledger['id'], type='expense', amount='100', category='Fuel')
        assert response.status_code == 201
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '800', 6)

        data = client.get(f"{API}/purchase-sales/{ledger['id']}/transactions", headers=auth_headers).json()
        assert data['total'] == 3

    def test_insufficient_balance(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='100')
        response = add_transaction(ledger['id'], type='purchase', amount='150', tins=1)
        assert response.status_code == 400
        assert response.json()['message'] == 'Insufficient balance'
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '100', 0)

    def test_insufficient_tins(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        response = add_transaction(ledger['id'], type='sale', amount='50', tins=5)
        assert response.status_code == 400
        assert response.json()['message'] == 'Insufficient tins'

    def test_tins_required_for_trade(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        response = add_transaction(ledger['id'], type='purchase', amount='10')
        assert response.status_code == 400
        assert response.json()['message'] == 'No of tins is required'

    def test_category_required_for_expense(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        response = add_transaction(ledger['id'], type='expense', amount='10', category='  ')
        assert response.status_code == 400
        assert response.json()['message'] == 'Category is required for expense'

    def test_fields_kept_per_type(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        purchase = add_transaction(ledger['id'], type='purchase', amount='10', tins=2, category='Fuel').json()
        expense = add_transaction(ledger['id'], type='expense', amount='10', tins=9, category='Fuel').json()

        assert purchase['category'] is None
        assert purchase['tins'] == 2
        assert expense['tins'] is None
        assert expense['category'] == 'Fuel'
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '980', 2)

    def test_update_applies_difference(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        tx = add_transaction(ledger['id'], type='purchase', amount='400', tins=10).json()

        response = client.put(
            f"{API}/purchase-sales/{ledger['id']}/transactions/{tx['id']}",
            json={'amount': '500', 'tins': 12},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()['type'] == 'purchase'
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '500', 12)

        response = client.put(
            f"{API}/purchase-sales/{ledger['id']}/transactions/{tx['id']}",
            json={'type': 'sale', 'tins': 0},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '1500', 0)

    def test_update_rejected_keeps_state(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        tx = add_transaction(ledger['id'], type='expense', amount='100', category='Fuel').json()

        response = client.put(
            f"{API}/purchase-sales/{ledger['id']}/transactions/{tx['id']}",
            json={'amount': '5000'},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()['message'] == 'Insufficient balance'
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '900', 0)

        stored = client.get(
            f"{API}/purchase-sales/{ledger['id']}/transactions/{tx['id']}", headers=auth_headers
        ).json()
        assert Decimal(stored['amount']) == Decimal('100')

    def test_delete_reverses_effect(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        tx = add_transaction(ledger['id'], type='purchase', amount='400', tins=10).json()

        response = client.delete(
            f"{API}/purchase-sales/{ledger['id']}/transactions/{tx['id']}", headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()['message'] == 'Transaction deleted successfully'
        assert_totals(get_ledger(client, auth_headers, ledger['id']), '1000', 0)

    def test_delete_refused_when_tins_already_sold(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        purchase = add_transaction(ledger['id'], type='purchase', amount='400', tins=10).json()
        add_transaction(ledger['id'], type='sale', amount='500', tins=8)

        response = client.delete(
            f"{API}/purchase-sales/{ledger['id']}/transactions/{purchase['id']}", headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()['message'] == 'Insufficient tins'

    def test_transaction_of_another_ledger(self, client, auth_headers, make_ledger, add_transaction):
        first = make_ledger()
        second = make_ledger()
        tx = add_transaction(first['id'], type='expense', amount='10', category='Fuel').json()

        url = f"{API}/purchase-sales/{second['id']}/transactions/{tx['id']}"
        assert client.get(url, headers=auth_headers).status_code == 404
        assert client.delete(url, headers=auth_headers).status_code == 404

    def test_unknown_ledger(self, client, auth_headers, add_transaction):
        response = add_transaction('PS-MISSING0', type='expense', amount='10', category='Fuel')
        assert response.status_code == 404
        assert response.json()['message'] == 'Purchase-sale not found'


class TestOpeningBalance:

    def test_change_shifts_current_balance(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        add_transaction(ledger['id'], type='purchase', amount='400', tins=10)

        response = client.put(
            f"{API}/purchase-sales/{ledger['id']}",
            json={'opening_balance': '1500'},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data['opening_balance']) == Decimal('1500')
        assert_totals(data, '1100', 10)

    def test_change_below_spent_rejected(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        add_transaction(ledger['id'], type='purchase', amount='400', tins=10)

        response = client.put(
            f"{API}/purchase-sales/{ledger['id']}",
            json={'opening_balance': '200'},
            headers=auth_headers,
        )
        assert response.status_code == 400
        data = get_ledger(client, auth_headers, ledger['id'])
        assert Decimal(data['opening_balance']) == Decimal('1000')
        assert_totals(data, '600', 10)

    def test_vehicle_change_copies_details(self, client, auth_headers, make_branch, make_vehicle, make_ledger):
        ledger = make_ledger()
        branch = make_branch()
        vehicle = make_vehicle(vehicle_name='Tanker 8', branch_id=branch['id'])

        data = client.put(
            f"{API}/purchase-sales/{ledger['id']}",
            json={'vehicle_id': vehicle['id']},
            headers=auth_headers,
        ).json()
        assert data['vehicle_name'] == 'Tanker 8'
        assert data['branch_id'] == branch['id']


class TestCollection:

    def test_complete_books_revenue(self, client, auth_headers, make_vehicle, make_ledger, add_transaction):
        vehicle = make_vehicle(vehicle_name='Tanker 1')
        ledger = make_ledger(opening_balance='1000', vehicle=vehicle)
        add_transaction(ledger['id'], type='expense', amount='200', category='Fuel')

        response = client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data['completed'] is True
        assert data['completed_at'] is not None
        assert data['collection_expense_id']

        expense = client.get(f"{API}/expenses/{data['collection_expense_id']}", headers=auth_headers).json()
        assert expense['expense_type'] == 'revenue'
        assert expense['category'] == 'Purchase & Sale'
        assert expense['title'] == 'Purchase & Sale Collection - Tanker 1'
        assert expense['vehicle_id'] == vehicle['id']
        assert Decimal(expense['amount']) == Decimal('800')

    def test_complete_is_idempotent(self, client, auth_headers, make_ledger):
        ledger = make_ledger()
        first = client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers).json()
        second = client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers).json()

        assert first['collection_expense_id'] == second['collection_expense_id']
        expenses = client.get(f"{API}/expenses", headers=auth_headers).json()
        assert expenses['total'] == 1

    def test_completed_ledger_is_locked(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        tx = add_transaction(ledger['id'], type='expense', amount='10', category='Fuel').json()
        client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers)

        response = add_transaction(ledger['id'], type='expense', amount='10', category='Fuel')
        assert response.status_code == 400
        assert response.json()['message'] == 'Purchase-sale is completed'

        url = f"{API}/purchase-sales/{ledger['id']}/transactions/{tx['id']}"
        assert client.put(url, json={'amount': '5'}, headers=auth_headers).status_code == 400
        assert client.delete(url, headers=auth_headers).status_code == 400

    def test_completed_ledger_rejects_edits(self, client, auth_headers, make_vehicle, make_ledger):
        ledger = make_ledger(opening_balance='1000')
        completed = client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers).json()
        other = make_vehicle(vehicle_name='Spare')

        url = f"{API}/purchase-sales/{ledger['id']}"
        for payload in ({'opening_balance': '5000'}, {'vehicle_id': other['id']}):
            response = client.put(url, json=payload, headers=auth_headers)
            assert response.status_code == 400
            assert response.json()['message'] == 'Purchase-sale is completed'

        data = get_ledger(client, auth_headers, ledger['id'])
        assert Decimal(data['opening_balance']) == Decimal('1000')
        assert_totals(data, '1000', 0)
        assert data['vehicle_id'] == ledger['vehicle_id']

        expense = client.get(f"{API}/expenses/{completed['collection_expense_id']}", headers=auth_headers).json()
        assert Decimal(expense['amount']) == Decimal(data['current_balance'])

    def test_undo_removes_expense(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        completed = client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers).json()

        response = client.post(f"{API}/purchase-sales/{ledger['id']}/undo-complete", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data['completed'] is False
        assert data['collection_expense_id'] is None

        response = client.get(f"{API}/expenses/{completed['collection_expense_id']}", headers=auth_headers)
        assert response.status_code == 404

        response = add_transaction(ledger['id'], type='expense', amount='10', category='Fuel')
        assert response.status_code == 201

    def test_complete_unknown_ledger(self, client, auth_headers):
        response = client.post(f"{API}/purchase-sales/PS-MISSING0/complete", headers=auth_headers)
        assert response.status_code == 404


class TestMaintenance:

    def test_recalculate(self, client, auth_headers, db_session, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        add_transaction(ledger['id'], type='purchase', amount='400', tins=10)
        add_transaction(ledger['id'], type='sale', amount='100', tins=3)

        db_session.query(PurchaseSale).filter(PurchaseSale.id == ledger['id']).update(
            {PurchaseSale.current_balance: Decimal('1'), PurchaseSale.current_tins: 99}
        )
        db_session.commit()

        response = client.post(f"{API}/purchase-sales/{ledger['id']}/recalculate", headers=auth_headers)
        assert response.status_code == 200
        assert_totals(response.json(), '700', 7)

    def test_missing_totals_are_backfilled(self, client, auth_headers, db_session, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='500')
        add_transaction(ledger['id'], type='purchase', amount='200', tins=4)

        db_session.query(PurchaseSale).filter(PurchaseSale.id == ledger['id']).update(
            {PurchaseSale.current_balance: None, PurchaseSale.current_tins: None}
        )
        db_session.commit()

        assert_totals(get_ledger(client, auth_headers, ledger['id']), '300', 4)

    def test_failed_backfill_is_bad_request(
        self, client, auth_headers, db_session, monkeypatch, make_ledger
    ):
        ledger = make_ledger(opening_balance='500')
        db_session.query(PurchaseSale).filter(PurchaseSale.id == ledger['id']).update(
            {PurchaseSale.current_balance: None}
        )
        db_session.commit()

        def failing_commit(db, instance, action):
            db.rollback()
            raise ValueError(f"Failed to {action}.")

        monkeypatch.setattr(purchase_sale_service, '_commit', failing_commit)

        response = client.get(f"{API}/purchase-sales/{ledger['id']}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()['message'] == 'Failed to backfill purchase-sale.'

    def test_delete_removes_transactions_and_collection(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger()
        add_transaction(ledger['id'], type='expense', amount='10', category='Fuel')
        client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers)

        response = client.delete(f"{API}/purchase-sales/{ledger['id']}", headers=auth_headers)
        assert response.status_code == 200

        assert client.get(f"{API}/purchase-sales/{ledger['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"{API}/expenses", headers=auth_headers).json()['total'] == 0
        report = client.get(f"{API}/transactions", headers=auth_headers).json()
        assert report['transactions'] == []
