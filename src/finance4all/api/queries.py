"""
GraphQL operations used by Finance4All clients.
"""

from finance4all.api.client import GraphQLClient
from finance4all.core.exceptions import ApiError
from finance4all.models.reports import DashboardSummary

# Key dashboard metrics, each with the previous period and percent change
GET_DASHBOARD_SUMMARY = """
query GetDashboardSummary {
  dashboardSummary {
    netWorth {
      current
      previous
      changePercent
    }
    monthlyIncome {
      current
      previous
      changePercent
    }
    monthlyExpenses {
      current
      previous
      changePercent
    }
    cashFlow {
      current
      previous
      changePercent
    }
  }
}
"""


def fetch_dashboard_summary(client: GraphQLClient) -> DashboardSummary:
    """
    Run ``GetDashboardSummary``.

    Raises:
        ApiError: If the response has no summary
    """
    result = client.execute(GET_DASHBOARD_SUMMARY, operation_name="GetDashboardSummary")
    summary = (result.data or {}).get("dashboardSummary")
    if summary is None:
        message = result.errors[0].get("message") if result.errors else "No data returned"
        raise ApiError(message)
    return DashboardSummary.model_validate(summary)
