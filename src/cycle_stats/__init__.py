"""Box-score ingestion, season aggregation and player valuation for MLB seasons."""
