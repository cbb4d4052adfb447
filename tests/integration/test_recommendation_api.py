"""
Integration tests for the recommendation API.

These tests verify:
1. POST /v1/recommendations scores a merchant end to end
2. Risk tiers and reserve policies for representative merchants
3. Partial records and the strict missing-input policy
4. Error mapping (unknown merchant, Signal Store down, bad rules)
5. Case webhook publication for high-risk merchants
"""

import pytest
from httpx import AsyncClient

from merchant_risk.service.scoring import ScoringSettings


async def _score(client: AsyncClient, merchant_id: str):
    return await client.post("/v1/recommendations", json={"merchant_id": merchant_id})


# =============================================================================
# Scoring Outcome Tests
# =============================================================================

class TestScoringOutcomes:
    """Tests for POST /v1/recommendations with representative merchants."""

    @pytest.mark.asyncio
    async def test_risky_merchant_gets_very_high_tier_and_combined_reserve(
        self,
        client: AsyncClient,
    ):
        """
        A 10-day-old gambling merchant with a transaction burst and high
        verification failures should be very_high risk.

        Low trust and a high model score push the reserve one band heavier.
        """
        response = await _score(client, "merchant_risky")

        assert response.status_code == 201
        data = response.json()

        assert data["factor_scores"] == {
            "velocity": 3,
            "verification_failures": 3,
            "amount_pattern": 0,
            "category": 3,
            "age_vs_activity": 3,
            "timing": 2,
        }
        assert data["composite_score"] == 14
        assert data["risk_tier"] == "very_high"
        assert data["dominant_reason"] == "fraudulent"
        assert data["historical_adverse_event_score"] == 3

        reserve = data["reserve"]
        assert reserve["reserve_type"] == "both"
        assert reserve["percentage"] == 22.5
        assert reserve["minimum_amount"] == 5000.0
        assert reserve["hold_days"] == 180
        assert reserve["band"] == "combined"
        assert reserve["rule"] == "very_high/heavier"

    @pytest.mark.asyncio
    async def test_established_merchant_needs_no_reserve(
        self,
        client: AsyncClient,
    ):
        """A long-standing, trusted grocery merchant should be low risk with no reserve."""
        response = await _score(client, "merchant_established")

        assert response.status_code == 201
        data = response.json()

        assert data["composite_score"] == 0
        assert data["risk_tier"] == "low"
        assert data["dominant_reason"] == "no_events"
        assert data["historical_adverse_event_score"] == 0
        assert data["partial"] is False
        assert data["reserve"]["reserve_type"] == "none"
        assert data["reserve"]["percentage"] is None
        assert data["reserve"]["rule"] == "low/lighter"

    @pytest.mark.asyncio
    async def test_failed_transfer_forces_rolling_reserve(
        self,
        client: AsyncClient,
    ):
        """A recent failed fund transfer should force at least a rolling reserve."""
        response = await _score(client, "merchant_failed_transfer")

        assert response.status_code == 201
        data = response.json()

        assert data["risk_tier"] == "low"
        assert data["reserve"]["reserve_type"] == "rolling"
        assert data["reserve"]["percentage"] == 5.0
        assert data["reserve"]["hold_days"] == 90
        assert data["reserve"]["band"] == "rolling_light"
        assert data["reserve"]["rule"] == "failed_transfer_override"

    @pytest.mark.asyncio
    async def test_high_tier_merchant_gets_category_adjusted_rolling_reserve(
        self,
        client: AsyncClient,
    ):
        """Travel (category 2) adds 5 percentage points to the rolling band."""
        response = await _score(client, "merchant_travel")

        assert response.status_code == 201
        data = response.json()

        assert data["composite_score"] == 8
        assert data["risk_tier"] == "high"
        assert data["reserve"]["reserve_type"] == "rolling"
        assert data["reserve"]["percentage"] == 10.0
        assert data["reserve"]["rule"] == "high/neutral"

    @pytest.mark.asyncio
    async def test_tied_reason_counts_resolve_by_severity(
        self,
        client: AsyncClient,
    ):
        """Equal counts should pick the more severe reason code."""
        response = await _score(client, "merchant_travel")

        assert response.json()["dominant_reason"] == "fraudulent"

    @pytest.mark.asyncio
    async def test_response_carries_audit_trail(
        self,
        client: AsyncClient,
    ):
        """Every record should name its snapshot, rules and inputs."""
        response = await _score(client, "merchant_risky")
        data = response.json()

        assert data["snapshot_id"] == "snap-2026-10-18-merchant_risky"
        assert len(data["ruleset_fingerprint"]) == 16
        assert data["computed_at"].endswith("Z")
        assert data["inputs"]["merchant"]["industry"] == "gambling"
        assert data["inputs"]["facts"]["max_daily_txn_count"] == 60
        assert data["inputs"]["reasons"][0] == {"reason_code": "fraudulent", "count": 3}
        assert data["explanation"].startswith("merchant_risky: VERY_HIGH risk (composite 14)")

    @pytest.mark.asyncio
    async def test_each_run_creates_a_new_record(
        self,
        client: AsyncClient,
    ):
        """Scoring the same snapshot twice gives two records with equal results."""
        first = (await _score(client, "merchant_risky")).json()
        second = (await _score(client, "merchant_risky")).json()

        assert first["recommendation_id"] != second["recommendation_id"]
        assert first["factor_scores"] == second["factor_scores"]
        assert first["reserve"] == second["reserve"]
        assert first["ruleset_fingerprint"] == second["ruleset_fingerprint"]


# =============================================================================
# Missing Input Tests
# =============================================================================

class TestMissingInputs:
    """Tests for merchants with unknown signals."""

    @pytest.mark.asyncio
    async def test_unknown_inputs_are_flagged_partial(
        self,
        client: AsyncClient,
    ):
        """By default unknown factors score 0 and the record is partial."""
        response = await _score(client, "merchant_partial")

        assert response.status_code == 201
        data = response.json()

        assert data["partial"] is True
        assert data["missing_inputs"] == ["verification_failures", "timing"]
        assert data["factor_scores"]["verification_failures"] is None
        assert data["factor_scores"]["timing"] is None
        assert data["composite_score"] == 1
        assert data["risk_tier"] == "low"
        assert data["reserve"]["rule"] == "low/neutral"

    @pytest.mark.asyncio
    async def test_strict_policy_rejects_unknown_inputs(
        self,
        client: AsyncClient,
        strict_missing_policy,
    ):
        """With the fail policy, unknown inputs give 422 naming them."""
        response = await _score(client, "merchant_partial")

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "MISSING_FACT"
        assert "verification_failures" in data["message"]
        assert "timing" in data["message"]

    @pytest.mark.asyncio
    async def test_strict_policy_accepts_complete_merchants(
        self,
        client: AsyncClient,
        strict_missing_policy,
    ):
        """The fail policy only affects merchants with unknown inputs."""
        response = await _score(client, "merchant_risky")

        assert response.status_code == 201


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestErrorHandling:
    """Tests for error mapping on the recommendation endpoints."""

    @pytest.mark.asyncio
    async def test_unknown_merchant_returns_404(
        self,
        client: AsyncClient,
    ):
        response = await _score(client, "merchant_does_not_exist")

        assert response.status_code == 404
        assert response.json()["error"] == "MERCHANT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_blank_merchant_id_is_rejected(
        self,
        client: AsyncClient,
    ):
        response = await client.post("/v1/recommendations", json={"merchant_id": "   "})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_signal_store_failure_returns_503(
        self,
        client_with_failing_signal_store: AsyncClient,
    ):
        response = await _score(client_with_failing_signal_store, "merchant_risky")

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "SIGNAL_STORE_ERROR"
        assert "request_id" in data

    @pytest.mark.asyncio
    async def test_malformed_rules_fail_before_scoring(
        self,
        client: AsyncClient,
        mock_signal_store,
        broken_tier_cutoffs,
    ):
        """A bad rule set should fail fast without reading the Signal Store."""
        response = await _score(client, "merchant_risky")

        assert response.status_code == 500
        assert response.json()["error"] == "CONFIGURATION_ERROR"
        assert mock_signal_store.call_count == 0

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(
        self,
        client: AsyncClient,
    ):
        response = await client.post(
            "/v1/recommendations",
            json={"merchant_id": "merchant_established"},
            headers={"X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"


# =============================================================================
# Case Webhook Tests
# =============================================================================

class TestCaseWebhook:
    """Tests for publishing recommendations to case management."""

    @pytest.mark.asyncio
    async def test_high_risk_recommendation_is_published(
        self,
        client: AsyncClient,
        mock_case_webhook,
    ):
        response = await _score(client, "merchant_risky")
        data = response.json()

        assert mock_case_webhook.call_count == 1
        sent = mock_case_webhook.webhooks_sent[0]
        assert sent["event"] == "recommendation_created"
        assert sent["recommendation_id"] == data["recommendation_id"]
        assert sent["risk_tier"] == "very_high"

    @pytest.mark.asyncio
    async def test_low_risk_recommendation_is_not_published(
        self,
        client: AsyncClient,
        mock_case_webhook,
    ):
        await _score(client, "merchant_established")

        assert mock_case_webhook.call_count == 0

    @pytest.mark.asyncio
    async def test_webhook_failure_does_not_fail_scoring(
        self,
        client_with_failing_webhook: AsyncClient,
        failing_case_webhook,
    ):
        response = await _score(client_with_failing_webhook, "merchant_risky")

        assert response.status_code == 201
        assert failing_case_webhook.call_count == 1


# =============================================================================
# Health Tests
# =============================================================================

class TestHealth:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_health_reports_ruleset_fingerprint(
        self,
        client: AsyncClient,
    ):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert len(data["ruleset_fingerprint"]) == 16

    @pytest.mark.asyncio
    async def test_health_fingerprint_matches_scored_records(
        self,
        client: AsyncClient,
        strict_missing_policy,
    ):
        """Health and scoring read the same, current rule set."""
        record = (await client.post(
            "/v1/recommendations", json={"merchant_id": "merchant_risky"}
        )).json()

        health = (await client.get("/health")).json()

        assert health["ruleset_fingerprint"] == record["ruleset_fingerprint"]
        assert health["ruleset_fingerprint"] != ScoringSettings(missing_fact_policy="flag").fingerprint
