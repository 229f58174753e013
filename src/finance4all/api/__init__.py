"""
Client for the Finance4All GraphQL API.
"""

from finance4all.api.client import GraphQLClient, GraphQLResult
from finance4all.api.queries import GET_DASHBOARD_SUMMARY, fetch_dashboard_summary

__all__ = ["GraphQLClient", "GraphQLResult", "GET_DASHBOARD_SUMMARY", "fetch_dashboard_summary"]
