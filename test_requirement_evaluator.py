"""Tests for the requirement evaluator."""

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from coc_verifier.engines import DEFAULT_LICENSED_INSURERS, RequirementEvaluator
from coc_verifier.fixtures import build_policy_data, standard_requirements
from coc_verifier.models import (
    CheckStatus,
    Coverage,
    CoverageType,
    InsuranceRequirement,
    Severity,
    VerificationStatus,
)
from coc_verifier.utils.errors import ErrorType, InvalidInputError


def _deficiency_types(outcome):
    return [d.type for d in outcome.deficiencies]


def _assert_critical_deficiencies_have_failing_checks(outcome):
    for deficiency in outcome.critical_deficiencies:
        assert any(
            c.status == CheckStatus.FAIL and c.check_type == deficiency.check_type
            for c in outcome.checks
        ), deficiency


def test_compliant_certificate_passes(evaluator, today):
    data = build_policy_data(today, "coc_compliant.pdf")
    outcome = evaluator.evaluate(
        data, standard_requirements(),
        project_end_date=today + timedelta(days=100),
        project_state="NSW",
    )

    assert outcome.status == VerificationStatus.PASS
    assert outcome.deficiencies == ()
    assert all(c.status == CheckStatus.PASS for c in outcome.checks)
    assert outcome.confidence_score == data.extraction_confidence
    assert [c.check_type for c in outcome.checks][:3] == [
        "policy_validity", "project_coverage", "abn_verification",
    ]


def test_expired_policy_fails(evaluator, today):
    data = build_policy_data(today, "coc_expired.pdf")
    outcome = evaluator.evaluate(data, standard_requirements())

    validity = outcome.checks_of_type("policy_validity")
    assert len(validity) == 1
    assert validity[0].status == CheckStatus.FAIL
    assert validity[0].details == "Policy has expired"
    assert _deficiency_types(outcome) == ["expired_policy"]
    assert outcome.deficiencies[0].severity == Severity.CRITICAL
    assert outcome.deficiencies[0].actual_value == f"Expired on {data.period_of_insurance_end}"
    assert outcome.status == VerificationStatus.FAIL


def test_expiring_soon_goes_to_review(evaluator, today):
    data = build_policy_data(today, "coc_expiring_soon.pdf")
    outcome = evaluator.evaluate(data, standard_requirements())

    validity = outcome.checks_of_type("policy_validity")[0]
    assert validity.status == CheckStatus.WARNING
    assert validity.details == "Policy expires in 10 days"
    assert outcome.deficiencies == ()
    assert outcome.status == VerificationStatus.REVIEW


@pytest.mark.parametrize(
    "days_left, details",
    [(0, "Policy expires today"), (1, "Policy expires in 1 day"), (30, "Policy expires in 30 days")],
)
def test_expiry_warning_wording(evaluator, today, days_left, details):
    data = replace(
        build_policy_data(today),
        period_of_insurance_end=(today + timedelta(days=days_left)).isoformat(),
    )
    validity = evaluator.evaluate(data, []).checks_of_type("policy_validity")[0]
    assert validity.status == CheckStatus.WARNING
    assert validity.details == details


def test_expiry_warning_horizon_is_configurable(today):
    data = replace(
        build_policy_data(today),
        period_of_insurance_end=(today + timedelta(days=45)).isoformat(),
    )
    default = RequirementEvaluator(clock=lambda: today).evaluate(data, [])
    wider = RequirementEvaluator(clock=lambda: today, expiry_warning_days=60).evaluate(data, [])
    assert default.status == VerificationStatus.PASS
    assert wider.status == VerificationStatus.REVIEW


def test_policy_ending_before_project_fails(evaluator, today):
    data = build_policy_data(today, "coc_early_expiry.pdf")
    project_end = today + timedelta(days=100)
    outcome = evaluator.evaluate(data, standard_requirements(), project_end_date=project_end.isoformat())

    project = outcome.checks_of_type("project_coverage")[0]
    assert project.status == CheckStatus.FAIL
    assert _deficiency_types(outcome) == ["policy_expires_before_project"]
    assert outcome.deficiencies[0].required_value == f"Valid until {project_end.isoformat()}"
    assert outcome.status == VerificationStatus.FAIL
    _assert_critical_deficiencies_have_failing_checks(outcome)


def test_project_end_date_as_epoch_milliseconds(evaluator, today):
    data = build_policy_data(today)
    project_end = datetime(2025, 6, 1, tzinfo=timezone.utc)
    outcome = evaluator.evaluate(
        data, [], project_end_date=int(project_end.timestamp() * 1000)
    )
    project = outcome.checks_of_type("project_coverage")[0]
    assert project.status == CheckStatus.PASS
    assert project.details == "Policy covers project period (ends 2025-06-01)"


@pytest.mark.parametrize(
    "coverage_type",
    [
        CoverageType.PUBLIC_LIABILITY,
        CoverageType.PRODUCTS_LIABILITY,
        CoverageType.WORKERS_COMP,
        CoverageType.PROFESSIONAL_INDEMNITY,
    ],
)
def test_missing_required_coverage(evaluator, today, coverage_type):
    data = build_policy_data(today)
    data = replace(data, coverages=tuple(c for c in data.coverages if c.type != coverage_type.value))
    outcome = evaluator.evaluate(data, standard_requirements(), project_state="NSW")

    missing = [d for d in outcome.deficiencies if d.type == "missing_coverage"]
    assert len(missing) == 1
    assert missing[0].severity == Severity.CRITICAL
    assert missing[0].coverage_type == coverage_type.value
    assert outcome.status == VerificationStatus.FAIL

    checks = outcome.checks_of_type(f"coverage_{coverage_type.value}")
    assert [c.details for c in checks] == ["Coverage not found in certificate"]
    _assert_critical_deficiencies_have_failing_checks(outcome)


def test_missing_coverage_required_value(evaluator, today):
    requirement = InsuranceRequirement(CoverageType.MOTOR_VEHICLE, minimum_limit=20_000_000)
    outcome = evaluator.evaluate(build_policy_data(today), [requirement])
    assert outcome.deficiencies[0].required_value == "$20,000,000"
    assert outcome.deficiencies[0].actual_value == "Not found"


def test_insufficient_limit(evaluator, today):
    requirement = InsuranceRequirement(CoverageType.PUBLIC_LIABILITY, minimum_limit=30_000_000)
    outcome = evaluator.evaluate(build_policy_data(today), [requirement])

    limit = outcome.checks_of_type("coverage_public_liability")[0]
    assert limit.status == CheckStatus.FAIL
    assert limit.details == "Limit $20,000,000 is below required $30,000,000"
    assert _deficiency_types(outcome) == ["insufficient_limit"]
    assert outcome.deficiencies[0].severity == Severity.MAJOR
    assert outcome.status == VerificationStatus.FAIL


def test_limit_without_minimum_passes(evaluator, today):
    requirement = InsuranceRequirement(CoverageType.WORKERS_COMP)
    outcome = evaluator.evaluate(build_policy_data(today), [requirement])
    limit = outcome.checks_of_type("coverage_workers_comp")[0]
    assert limit.status == CheckStatus.PASS
    assert limit.details == "Limit $2,000,000 meets minimum requirement"


def test_excess_too_high(evaluator, today):
    requirement = InsuranceRequirement(CoverageType.PUBLIC_LIABILITY, maximum_excess=500)
    outcome = evaluator.evaluate(build_policy_data(today), [requirement])

    excess = outcome.checks_of_type("excess_public_liability")[0]
    assert excess.status == CheckStatus.FAIL
    assert excess.details == "Excess $1,000 exceeds maximum $500"
    assert _deficiency_types(outcome) == ["excess_too_high"]
    assert outcome.deficiencies[0].severity == Severity.MINOR
    assert outcome.deficiencies[0].required_value == "Max $500"


def test_missing_principal_indemnity(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today, "coc_no_pi.pdf"), standard_requirements())

    check = outcome.checks_of_type("principal_indemnity_public_liability")[0]
    assert check.status == CheckStatus.FAIL
    assert check.details == "Principal indemnity extension required but not present"
    assert _deficiency_types(outcome) == ["missing_endorsement"]
    assert outcome.deficiencies[0].endorsement == "principal_indemnity"
    assert outcome.deficiencies[0].severity == Severity.MAJOR
    assert outcome.status == VerificationStatus.FAIL


def test_missing_cross_liability(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today, "coc_no_cross.pdf"), standard_requirements())
    assert outcome.checks_of_type("cross_liability_public_liability")[0].status == CheckStatus.FAIL
    assert [d.endorsement for d in outcome.deficiencies] == ["cross_liability"]


def test_unreported_endorsement_is_not_a_failure(evaluator, today):
    data = build_policy_data(today)
    coverage = Coverage(type="public_liability", limit=20_000_000, excess=1_000)
    data = replace(data, coverages=(coverage,))
    requirement = InsuranceRequirement(
        CoverageType.PUBLIC_LIABILITY,
        principal_indemnity_required=True,
        cross_liability_required=True,
    )
    outcome = evaluator.evaluate(data, [requirement])
    assert outcome.deficiencies == ()
    assert outcome.status == VerificationStatus.PASS


def test_workers_comp_state_mismatch(evaluator, today):
    outcome = evaluator.evaluate(
        build_policy_data(today, "coc_vic_wc.pdf"), standard_requirements(), project_state="NSW"
    )
    state = outcome.checks_of_type("workers_comp_state")[0]
    assert state.status == CheckStatus.FAIL
    assert state.details == "WC scheme is for VIC but project is in NSW"
    assert _deficiency_types(outcome) == ["state_mismatch"]
    assert outcome.deficiencies[0].required_value == "NSW scheme"
    assert outcome.deficiencies[0].actual_value == "VIC scheme"
    _assert_critical_deficiencies_have_failing_checks(outcome)


def test_workers_comp_state_skipped_without_project_state(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today, "coc_vic_wc.pdf"), standard_requirements())
    assert outcome.checks_of_type("workers_comp_state") == ()
    assert outcome.status == VerificationStatus.PASS


def test_abn_check_passes_without_expected_abn(evaluator, today):
    data = replace(build_policy_data(today), insured_party_abn="12345678901")
    abn = evaluator.evaluate(data, []).checks_of_type("abn_verification")[0]
    assert abn.status == CheckStatus.PASS
    assert abn.details == "ABN 12345678901 verified"


def test_abn_mismatch_with_expected_abn(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today), [], expected_abn="33 102 417 032")
    assert outcome.checks_of_type("abn_verification")[0].status == CheckStatus.FAIL
    assert _deficiency_types(outcome) == ["abn_mismatch"]
    assert outcome.status == VerificationStatus.FAIL

    matching = evaluator.evaluate(build_policy_data(today), [], expected_abn="51 824 753 556")
    assert matching.checks_of_type("abn_verification")[0].status == CheckStatus.PASS


def test_unlicensed_insurer(today):
    evaluator = RequirementEvaluator(clock=lambda: today, licensed_insurers=DEFAULT_LICENSED_INSURERS)

    licensed = evaluator.evaluate(build_policy_data(today), [])
    assert licensed.checks_of_type("apra_insurer_validation")[0].status == CheckStatus.PASS

    outcome = evaluator.evaluate(build_policy_data(today, "coc_unknown_insurer.pdf"), [])
    assert outcome.checks_of_type("apra_insurer_validation")[0].status == CheckStatus.FAIL
    assert _deficiency_types(outcome) == ["unlicensed_insurer"]
    assert outcome.status == VerificationStatus.FAIL


def test_low_confidence_goes_to_review(today):
    evaluator = RequirementEvaluator(clock=lambda: today, low_confidence_threshold=0.70)
    outcome = evaluator.evaluate(build_policy_data(today, "coc_low_confidence.pdf"), standard_requirements())

    confidence = outcome.checks_of_type("confidence_check")[0]
    assert confidence.status == CheckStatus.WARNING
    assert confidence.details == "Low confidence score (55%) - manual review recommended"
    assert outcome.status == VerificationStatus.REVIEW


def test_low_confidence_does_not_mask_failure(today):
    evaluator = RequirementEvaluator(clock=lambda: today, low_confidence_threshold=0.70)
    outcome = evaluator.evaluate(
        build_policy_data(today, "coc_low_confidence_expired.pdf"), standard_requirements()
    )
    assert outcome.status == VerificationStatus.FAIL
    assert outcome.checks_of_type("confidence_check") == ()


def test_low_confidence_rule_off_by_default(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today, "coc_low_confidence.pdf"), standard_requirements())
    assert outcome.status == VerificationStatus.PASS


def test_unparsable_end_date_is_a_failing_check(evaluator, today):
    data = replace(build_policy_data(today), period_of_insurance_end="thirty-first of June")
    outcome = evaluator.evaluate(data, standard_requirements(), project_end_date="2025-12-01")

    integrity = outcome.checks_of_type("data_integrity")
    assert len(integrity) == 1
    assert integrity[0].status == CheckStatus.FAIL
    assert outcome.checks_of_type("policy_validity") == ()
    assert outcome.checks_of_type("project_coverage") == ()
    assert outcome.status == VerificationStatus.FAIL


def test_unparsable_project_end_date_is_a_failing_check(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today), [], project_end_date="soon")
    assert outcome.checks_of_type("data_integrity")[0].details == "Unable to parse project end date 'soon'"
    assert outcome.status == VerificationStatus.FAIL


def test_non_numeric_limit_is_a_failing_check(evaluator, today):
    data = build_policy_data(today)
    coverage = Coverage(type="public_liability", limit=None, excess=1_000)
    data = replace(data, coverages=(coverage,))
    requirement = InsuranceRequirement(CoverageType.PUBLIC_LIABILITY, minimum_limit=20_000_000)

    outcome = evaluator.evaluate(data, [requirement])
    assert outcome.checks_of_type("data_integrity")[0].details == "Public Liability limit is not a number"
    assert outcome.status == VerificationStatus.FAIL


@pytest.mark.parametrize("raw_limit", ["NaN", "inf", "-inf", float("nan")])
def test_non_finite_limit_is_a_failing_check(evaluator, today, raw_limit):
    coverage = Coverage.from_dict({"type": "public_liability", "limit": raw_limit, "excess": 1_000})
    assert coverage.limit is None
    data = replace(build_policy_data(today), coverages=(coverage,))
    requirement = InsuranceRequirement(CoverageType.PUBLIC_LIABILITY, minimum_limit=20_000_000)

    outcome = evaluator.evaluate(data, [requirement])

    assert outcome.checks_of_type("data_integrity")[0].details == "Public Liability limit is not a number"
    assert outcome.checks_of_type("coverage_public_liability") == ()
    assert outcome.status == VerificationStatus.FAIL


@pytest.mark.parametrize("limit", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_limit_built_directly_is_a_failing_check(evaluator, today, limit):
    coverage = Coverage(type="public_liability", limit=limit, excess=1_000)
    data = replace(build_policy_data(today), coverages=(coverage,))
    requirement = InsuranceRequirement(CoverageType.PUBLIC_LIABILITY, minimum_limit=20_000_000)

    outcome = evaluator.evaluate(data, [requirement])

    assert outcome.checks_of_type("data_integrity")[0].status == CheckStatus.FAIL
    assert outcome.status == VerificationStatus.FAIL


@pytest.mark.parametrize("raw_excess", ["nan", "inf", float("-inf")])
def test_non_finite_excess_is_a_failing_check(evaluator, today, raw_excess):
    coverage = Coverage.from_dict({"type": "public_liability", "limit": 20_000_000, "excess": raw_excess})
    data = replace(build_policy_data(today), coverages=(coverage,))
    requirement = InsuranceRequirement(
        CoverageType.PUBLIC_LIABILITY, minimum_limit=20_000_000, maximum_excess=10_000,
    )

    outcome = evaluator.evaluate(data, [requirement])

    assert outcome.checks_of_type("coverage_public_liability")[0].status == CheckStatus.PASS
    assert outcome.checks_of_type("data_integrity")[0].details == "Public Liability excess is not a number"
    assert outcome.status == VerificationStatus.FAIL


def test_missing_inputs_raise_typed_errors(evaluator, today):
    with pytest.raises(InvalidInputError) as exc_info:
        evaluator.evaluate(None, standard_requirements())
    assert exc_info.value.context.error_type == ErrorType.MISSING_EXTRACTED_DATA

    with pytest.raises(InvalidInputError) as exc_info:
        evaluator.evaluate(build_policy_data(today), None)
    assert exc_info.value.context.error_type == ErrorType.MISSING_REQUIREMENTS


def test_evaluation_is_idempotent_under_frozen_clock(evaluator, today):
    data = build_policy_data(today, "coc_no_pi_vic_wc.pdf")
    kwargs = dict(project_end_date=today + timedelta(days=400), project_state="NSW")

    first = evaluator.evaluate(data, standard_requirements(), **kwargs)
    second = evaluator.evaluate(data, standard_requirements(), **kwargs)

    assert first == second
    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


def test_outcome_serialises_with_stable_field_names(evaluator, today):
    outcome = evaluator.evaluate(build_policy_data(today, "coc_expired.pdf"), standard_requirements())
    data = json.loads(json.dumps(outcome.to_dict()))
    assert set(data) == {"status", "checks", "deficiencies", "confidence_score"}
    assert set(data["checks"][0]) == {"check_type", "description", "status", "details"}
    assert set(data["deficiencies"][0]) == {
        "type", "severity", "description", "required_value", "actual_value",
    }
