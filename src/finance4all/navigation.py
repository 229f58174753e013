"""
Navigation menu structure for Finance4All clients.

Icons are Material icon names; clients map them to their own widgets.
"""

from typing import List, Optional

from pydantic import BaseModel


class NavItem(BaseModel):
    id: str
    label: str
    path: str
    icon: str
    badge: Optional[int] = None
    divider: bool = False


class NavSection(BaseModel):
    id: str
    title: Optional[str] = None
    items: List[NavItem]


class Breadcrumb(BaseModel):
    label: str
    path: str


HOME_PATH = "/dashboard"

NAVIGATION_CONFIG: List[NavSection] = [
    NavSection(
        id="main",
        items=[NavItem(id="dashboard", label="Dashboard", path="/dashboard", icon="Dashboard")],
    ),
    NavSection(
        id="finance",
        title="Finance",
        items=[
            NavItem(
                id="accounts",
                label="Accounts",
                path="/accounts",
                icon="AccountBalanceWallet",
            ),
            NavItem(
                id="transactions",
                label="Transactions",
                path="/transactions",
                icon="ReceiptLong",
            ),
            NavItem(id="categories", label="Categories", path="/categories", icon="Category"),
        ],
    ),
    NavSection(
        id="analysis",
        title="Analysis",
        items=[
            NavItem(id="cash-flow", label="Cash Flow", path="/cash-flow", icon="TrendingUp"),
            NavItem(id="budgets", label="Budgets", path="/budgets", icon="PieChart"),
            NavItem(id="projections", label="Projections", path="/projections", icon="Timeline"),
            NavItem(id="goals", label="Goals", path="/goals", icon="Savings"),
        ],
    ),
    NavSection(
        id="settings",
        items=[
            NavItem(
                id="settings",
                label="Settings",
                path="/settings",
                icon="Settings",
                divider=True,
            )
        ],
    ),
]


def get_active_nav_item(
    pathname: str, sections: Optional[List[NavSection]] = None
) -> Optional[NavItem]:
    """Find the menu item whose path matches exactly."""
    for section in sections if sections is not None else NAVIGATION_CONFIG:
        for item in section.items:
            if item.path == pathname:
                return item
    return None


def get_breadcrumbs(
    pathname: str, sections: Optional[List[NavSection]] = None
) -> List[Breadcrumb]:
    """
    Breadcrumb trail for a path.

    Always starts at Home; known pages add one crumb after it.
    """
    breadcrumbs = [Breadcrumb(label="Home", path=HOME_PATH)]
    if pathname == HOME_PATH:
        return breadcrumbs

    item = get_active_nav_item(pathname, sections)
    if item is not None:
        breadcrumbs.append(Breadcrumb(label=item.label, path=item.path))
    return breadcrumbs
