"""
Drug interaction checker.

Rules are data, not branches. Every rule is one of a closed set of kinds and
each kind has exactly one evaluator in _EVALUATORS:

  condition    — medication matches a pattern AND the contraindication notes mention a keyword
  combination  — two distinct selected medications match two pattern groups
  age          — medication matches AND the patient's age is outside [min_age, max_age]
  bmi          — medication matches AND the patient's BMI is below min_bmi
  goal         — medication matches AND a patient goal mentions a keyword

All matching is case-insensitive substring matching. age / bmi / goal rules
are inert unless a PatientContext is supplied.

Adding a rule to DEFAULT_RULES needs no code. Adding a kind means a new
dataclass, a RuleKind literal and an evaluator; the module refuses to import
if the literal and the registry disagree.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Literal, Union, get_args

logger = logging.getLogger(__name__)

RuleKind = Literal['condition', 'combination', 'age', 'bmi', 'goal']


class Severity(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


@dataclass(frozen=True)
class InteractionFinding:
    severity: Severity
    message: str
    rule_id: str = ''

    @property
    def is_blocking(self) -> bool:
        return self.severity is Severity.HIGH

    def to_dict(self) -> dict:
        return {'severity': self.severity.value, 'message': self.message, 'rule_id': self.rule_id}


@dataclass(frozen=True)
class PatientContext:
    age: int | None = None
    bmi: float | None = None
    goals: tuple[str, ...] = ()


# ── rule kinds ─────────────────────────────────────────────────────────────
#
# message may use {medication}; combination messages use {first} / {second}.

@dataclass(frozen=True)
class ConditionRule:
    id: str
    medication_patterns: tuple[str, ...]
    condition_keywords: tuple[str, ...]
    severity: Severity
    message: str
    kind: Literal['condition'] = 'condition'


@dataclass(frozen=True)
class CombinationRule:
    id: str
    first_patterns: tuple[str, ...]
    second_patterns: tuple[str, ...]
    severity: Severity
    message: str
    kind: Literal['combination'] = 'combination'


@dataclass(frozen=True)
class AgeRule:
    id: str
    medication_patterns: tuple[str, ...]
    severity: Severity
    message: str
    min_age: int | None = None
    max_age: int | None = None
    kind: Literal['age'] = 'age'


@dataclass(frozen=True)
class BmiRule:
    id: str
    medication_patterns: tuple[str, ...]
    min_bmi: float
    severity: Severity
    message: str
    kind: Literal['bmi'] = 'bmi'


@dataclass(frozen=True)
class GoalRule:
    id: str
    medication_patterns: tuple[str, ...]
    goal_keywords: tuple[str, ...]
    severity: Severity
    message: str
    kind: Literal['goal'] = 'goal'


InteractionRule = Union[ConditionRule, CombinationRule, AgeRule, BmiRule, GoalRule]


PDE5_INHIBITORS = ('sildenafil', 'viagra', 'tadalafil', 'cialis', 'vardenafil', 'levitra')
GLP1_AGONISTS = ('semaglutide', 'wegovy', 'ozempic', 'tirzepatide', 'mounjaro', 'zepbound')

DEFAULT_RULES: tuple[InteractionRule, ...] = (
    ConditionRule(
        id='pde5-nitrates',
        medication_patterns=PDE5_INHIBITORS,
        condition_keywords=('nitrate',),
        severity=Severity.HIGH,
        message='{medication} is contraindicated with nitrates',
    ),
    ConditionRule(
        id='glp1-medullary-thyroid',
        medication_patterns=GLP1_AGONISTS,
        condition_keywords=('medullary thyroid', 'men2', 'men 2', 'men-2', 'multiple endocrine neoplasia'),
        severity=Severity.HIGH,
        message=(
            '{medication} is contraindicated with a personal or family history of '
            'medullary thyroid carcinoma or MEN2'
        ),
    ),
    CombinationRule(
        id='pde5-duplicate',
        first_patterns=PDE5_INHIBITORS,
        second_patterns=PDE5_INHIBITORS,
        severity=Severity.MEDIUM,
        message='{first} and {second} are both PDE5 inhibitors; avoid duplicate therapy',
    ),
)


# ── evaluation ─────────────────────────────────────────────────────────────

def _matches(text: str, patterns: Iterable[str]) -> bool:
    lowered = str(text or '').lower()
    return any(pattern.lower() in lowered for pattern in patterns)


def _matching_names(names: list[str], patterns: Iterable[str]) -> list[str]:
    return [name for name in names if _matches(name, patterns)]


def _eval_condition(rule: ConditionRule, names, notes, patient) -> list[InteractionFinding]:
    if not _matches(notes, rule.condition_keywords):
        return []
    return [
        InteractionFinding(rule.severity, rule.message.format(medication=name), rule.id)
        for name in _matching_names(names, rule.medication_patterns)
    ]


def _eval_combination(rule: CombinationRule, names, notes, patient) -> list[InteractionFinding]:
    for first in _matching_names(names, rule.first_patterns):
        for second in _matching_names(names, rule.second_patterns):
            if first.lower() != second.lower():
                return [InteractionFinding(rule.severity, rule.message.format(first=first, second=second), rule.id)]
    return []


def _eval_age(rule: AgeRule, names, notes, patient) -> list[InteractionFinding]:
    if patient is None or patient.age is None:
        return []
    too_young = rule.min_age is not None and patient.age < rule.min_age
    too_old = rule.max_age is not None and patient.age > rule.max_age
    if not (too_young or too_old):
        return []
    return [
        InteractionFinding(rule.severity, rule.message.format(medication=name), rule.id)
        for name in _matching_names(names, rule.medication_patterns)
    ]


def _eval_bmi(rule: BmiRule, names, notes, patient) -> list[InteractionFinding]:
    if patient is None or patient.bmi is None or patient.bmi >= rule.min_bmi:
        return []
    return [
        InteractionFinding(rule.severity, rule.message.format(medication=name), rule.id)
        for name in _matching_names(names, rule.medication_patterns)
    ]


def _eval_goal(rule: GoalRule, names, notes, patient) -> list[InteractionFinding]:
    if patient is None or not any(_matches(goal, rule.goal_keywords) for goal in patient.goals):
        return []
    return [
        InteractionFinding(rule.severity, rule.message.format(medication=name), rule.id)
        for name in _matching_names(names, rule.medication_patterns)
    ]


_EVALUATORS: dict[str, Callable[..., list[InteractionFinding]]] = {
    'condition': _eval_condition,
    'combination': _eval_combination,
    'age': _eval_age,
    'bmi': _eval_bmi,
    'goal': _eval_goal,
}

if set(_EVALUATORS) != set(get_args(RuleKind)):
    raise RuntimeError(
        f"Interaction rule kinds {sorted(get_args(RuleKind))} and evaluators {sorted(_EVALUATORS)} disagree"
    )


def _medication_name(medication) -> str:
    if isinstance(medication, dict):
        name = medication.get('name')
    elif isinstance(medication, str):
        name = medication
    else:
        name = getattr(medication, 'name', None)
    return str(name).strip() if name is not None else ''


def _notes_text(contraindication_text) -> str:
    if contraindication_text is None:
        return ''
    if isinstance(contraindication_text, (list, tuple)):
        return '\n'.join(str(line) for line in contraindication_text)
    return str(contraindication_text)


def check_interactions(
    medications,
    contraindication_text: str | None,
    rules: Iterable[InteractionRule] | None = None,
    patient: PatientContext | None = None,
) -> list[InteractionFinding]:
    """
    Evaluate the rule table against the selected medications.

    medications may be MedicationLineItem objects, dicts with a "name" key or
    plain names. Non-string names and notes are read as text. Findings come
    back in rule order.
    """
    names = [name for name in (_medication_name(m) for m in medications or ()) if name]
    notes = _notes_text(contraindication_text)
    findings: list[InteractionFinding] = []

    for rule in DEFAULT_RULES if rules is None else rules:
        evaluator = _EVALUATORS.get(rule.kind)
        if evaluator is None:
            raise ValueError(f"Unknown interaction rule kind: {rule.kind!r}")
        findings.extend(evaluator(rule, names, notes, patient))

    if findings:
        logger.info(
            "Interaction check produced %d finding(s): %s",
            len(findings), ', '.join(f.rule_id for f in findings),
        )
    return findings


def has_blocking(findings: Iterable[InteractionFinding]) -> bool:
    return any(finding.is_blocking for finding in findings)
