"""Pandera schemas and column layouts for the dashboard snapshot."""

from pandera import Column, Check, DataFrameSchema

from leadboard.utils.types import LeadStatus

TRANSACTION_COLUMNS = [
    "txn_id",
    "branch_id",
    "user_id",
    "product_id",
    "campaign_id",
    "segment_id",
    "customer_name",
    "amount",
    "status",
    "date",
    "closed_date",
]

LOOKUP_COLUMNS = {
    "branches": ["branch_id", "name", "region", "country"],
    "users": ["user_id", "first_name", "last_name", "role"],
    "products": ["product_id", "name"],
    "campaigns": ["campaign_id", "name"],
    "segments": ["segment_id", "name"],
}

# Natural key of each lookup collection
LOOKUP_KEYS = {
    "branches": "branch_id",
    "users": "user_id",
    "products": "product_id",
    "campaigns": "campaign_id",
    "segments": "segment_id",
}

TARGET_COLUMNS = ["user_id", "month", "target_amount"]

# Prepared transaction frame: dates already truncated to calendar days
TRANSACTION_SCHEMA = DataFrameSchema(
    columns={
        "txn_id": Column(str, unique=True),
        "branch_id": Column(str, nullable=True),
        "user_id": Column(str, nullable=True),
        "amount": Column(float, Check.greater_than_or_equal_to(0), nullable=True),
        "status": Column(str, Check.isin([s.value for s in LeadStatus])),
        "date": Column("datetime64[ns]"),
        "closed_date": Column("datetime64[ns]", nullable=True),
    },
    strict=False,  # product/campaign/segment columns are optional in the feed
    coerce=True,
)

BRANCH_SCHEMA = DataFrameSchema(
    columns={
        "branch_id": Column(str, unique=True),
        "name": Column(str),
        "region": Column(str, nullable=True),
        "country": Column(str, nullable=True),
    },
    strict=False,
    coerce=True,
)

USER_SCHEMA = DataFrameSchema(
    columns={
        "user_id": Column(str, unique=True),
        "first_name": Column(str, nullable=True),
        "last_name": Column(str, nullable=True),
        "role": Column(str, nullable=True),
    },
    strict=False,
    coerce=True,
)

REVENUE_TARGET_SCHEMA = DataFrameSchema(
    columns={
        "user_id": Column(str),
        "month": Column(str, Check.str_matches(r"^\d{4}-\d{2}$")),
        "target_amount": Column(float, Check.greater_than_or_equal_to(0)),
    },
    strict=False,
    coerce=True,
)
