from finsync.domain import Band, NotificationType, Target, TxType
from finsync.evaluator import TargetEvaluator, build_request, classify, fingerprint, severity


def make_target(kind, target_amount, current_amount, id="g1", category="Salary"):
    return Target(id=id, type=TxType(kind), category=category,
                  target_amount=target_amount, current_amount=current_amount)


def test_income_target_approaching():
    target = make_target("income", 1000, 850)
    band = classify(target)
    assert band == Band.APPROACHING
    assert severity(target, band) == NotificationType.SUCCESS


def test_expense_target_approaching_is_a_warning():
    target = make_target("expense", 1000, 800, category="Food")
    assert classify(target) == Band.APPROACHING
    assert severity(target, Band.APPROACHING) == NotificationType.WARNING


def test_goal_achieved_and_limit_exceeded():
    income = make_target("income", 1000, 1000)
    expense = make_target("expense", 1000, 1500, category="Food")
    assert classify(income) == Band.ACHIEVED
    assert classify(expense) == Band.EXCEEDED
    assert build_request(income, Band.ACHIEVED).type == NotificationType.SUCCESS
    assert build_request(expense, Band.EXCEEDED).type == NotificationType.WARNING


def test_below_threshold_is_silent():
    target = make_target("income", 1000, 799)
    assert classify(target) == Band.NONE
    assert build_request(target, Band.NONE) is None


def test_request_text():
    req = build_request(make_target("expense", 1000, 1500, category="Food"), Band.EXCEEDED, "£")
    assert req.title == "Limit exceeded"
    assert "£1,500.00" in req.message and "£1,000.00" in req.message
    assert req.to_dict() == {"title": req.title, "message": req.message, "type": "warning", "isRead": False}


def test_repeated_evaluation_repeats_requests_by_default():
    evaluator = TargetEvaluator()
    targets = [make_target("income", 1000, 900), make_target("income", 1000, 100, id="g2")]
    assert len(evaluator.evaluate(targets)) == 1
    assert len(evaluator.evaluate(targets)) == 1


def test_dedupe_suppresses_same_crossing():
    evaluator = TargetEvaluator(dedupe=True)
    targets = [make_target("income", 1000, 900)]
    first = evaluator.evaluate(targets)
    assert len(first) == 1
    assert evaluator.evaluate(targets) == []

    # a different band for the same target is new content
    assert len(evaluator.evaluate([make_target("income", 1000, 1000)])) == 1

    evaluator.forget(first[0])
    assert len(evaluator.evaluate(targets)) == 1


def test_fingerprint_depends_on_target():
    a = build_request(make_target("income", 1000, 900, id="a"), Band.APPROACHING)
    b = build_request(make_target("income", 1000, 900, id="b"), Band.APPROACHING)
    assert fingerprint(a) != fingerprint(b)
