"""
Dashboard figures.

revenue = revenue expenses
expense = other expenses + ledger purchases + ledger expenses
"""

from decimal import Decimal

from tests.conftest import API, post_expense


def figures(block):
    return tuple(Decimal(block[key]) for key in ('revenue', 'expense', 'profit'))


class TestDashboardTotals:

    def test_revenue_comes_only_from_revenue_expenses(
        self, client, auth_headers, make_ledger, add_transaction
    ):
        post_expense(client, auth_headers, amount='1000', expense_type='revenue', date='2024-05-01')
        post_expense(client, auth_headers, amount='200', date='2024-05-01')

        ledger = make_ledger(opening_balance='5000')
        add_transaction(ledger['id'], type='purchase', amount='300', tins=10)
        add_transaction(ledger['id'], type='sale', amount='500', tins=5)
        add_transaction(ledger['id'], type='expense', amount='50', category='Fuel')

        data = client.get(f"{API}/dashboard", headers=auth_headers).json()
        assert figures(data['totals']) == (Decimal('1000'), Decimal('550'), Decimal('450'))

    def test_collection_counts_as_revenue(self, client, auth_headers, make_ledger, add_transaction):
        ledger = make_ledger(opening_balance='1000')
        add_transaction(ledger['id'], type='expense', amount='100', category='Fuel')
        client.post(f"{API}/purchase-sales/{ledger['id']}/complete", headers=auth_headers)

        data = client.get(f"{API}/dashboard", headers=auth_headers).json()
        assert figures(data['totals']) == (Decimal('900'), Decimal('100'), Decimal('800'))
        assert figures(data['today']) == (Decimal('900'), Decimal('0'), Decimal('900'))

    def test_date_range(self, client, auth_headers):
        post_expense(client, auth_headers, amount='100', date='2024-04-30')
        post_expense(client, auth_headers, amount='70', date='2024-05-15')

        data = client.get(
            f"{API}/dashboard",
            params={'date_from': '2024-05-01', 'date_to': '2024-05-31'},
            headers=auth_headers,
        ).json()
        assert data['filters']['date_from'] == '2024-05-01'
        assert figures(data['totals']) == (Decimal('0'), Decimal('70'), Decimal('-70'))

    def test_inverted_range(self, client, auth_headers):
        response = client.get(
            f"{API}/dashboard",
            params={'date_from': '2024-06-01', 'date_to': '2024-05-01'},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_today(self, client, auth_headers):
        post_expense(client, auth_headers, amount='40')
        post_expense(client, auth_headers, amount='999', date='2020-01-01')

        data = client.get(f"{API}/dashboard", headers=auth_headers).json()
        assert figures(data['today']) == (Decimal('0'), Decimal('40'), Decimal('-40'))


class TestDashboardBranches:

    def test_branch_filter(self, client, auth_headers, make_branch, make_vehicle, make_ledger, add_transaction):
        north = make_branch('North')
        south = make_branch('South')
        vehicle = make_vehicle(branch_id=north['id'])
        ledger = make_ledger(opening_balance='1000', vehicle=vehicle)
        add_transaction(ledger['id'], type='purchase', amount='300', tins=3)
        post_expense(client, auth_headers, amount='80', branch_id=south['id'])

        data = client.get(f"{API}/dashboard", params={'branch_id': north['id']}, headers=auth_headers).json()
        assert figures(data['totals'])[1] == Decimal('300')

        data = client.get(f"{API}/dashboard", params={'branch_id': south['id']}, headers=auth_headers).json()
        assert figures(data['totals'])[1] == Decimal('80')

    def test_all_means_no_filter(self, client, auth_headers, make_branch):
        branch = make_branch()
        post_expense(client, auth_headers, amount='80', branch_id=branch['id'])
        post_expense(client, auth_headers, amount='20')

        data = client.get(f"{API}/dashboard", params={'branch_id': 'all'}, headers=auth_headers).json()
        assert data['filters']['branch_id'] is None
        assert figures(data['totals'])[1] == Decimal('100')


class TestDashboardByVehicle:

    def test_sorted_by_profit(self, client, auth_headers, make_vehicle):
        low = make_vehicle(vehicle_name='Low')
        high = make_vehicle(vehicle_name='High')
        idle = make_vehicle(vehicle_name='Idle')
        post_expense(client, auth_headers, amount='100', expense_type='revenue', vehicle_id=low['id'])
        post_expense(client, auth_headers, amount='500', expense_type='revenue', vehicle_id=high['id'])
        post_expense(client, auth_headers, amount='50', vehicle_id=idle['id'])

        rows = client.get(f"{API}/dashboard", headers=auth_headers).json()['by_vehicle']
        assert [row['vehicle_name'] for row in rows] == ['High', 'Low', 'Idle']
        assert Decimal(rows[2]['profit']) == Decimal('-50')

    def test_ledger_outflow_per_vehicle(self, client, auth_headers, make_vehicle, make_ledger, add_transaction):
        vehicle = make_vehicle(vehicle_name='Trader')
        ledger = make_ledger(opening_balance='1000', vehicle=vehicle)
        add_transaction(ledger['id'], type='purchase', amount='250', tins=5)

        rows = client.get(f"{API}/dashboard", headers=auth_headers).json()['by_vehicle']
        assert len(rows) == 1
        assert Decimal(rows[0]['expense']) == Decimal('250')
