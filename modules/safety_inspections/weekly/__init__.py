"""Weekly report aggregation over saved inspections."""
