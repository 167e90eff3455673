"""File exporters for follow-up logs and weekly reports."""
