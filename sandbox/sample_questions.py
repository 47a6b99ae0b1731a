"""
sandbox/sample_questions.py — 개발용 샘플 문제 은행

보기 점수는 1~4점 (가장 적절한 행동이 4점).
"""

CATEGORY_ORDER = ["TEKNIS", "MANAJERIAL", "SOSIAL KULTURAL", "WAWANCARA"]

# (카테고리, 문제, [(보기, 점수), ...])
_RAW = [
    ("TEKNIS", "A shared report template produces inconsistent totals. What do you do first?", [
        ("Ignore it until someone complains", 1),
        ("Fix the totals by hand in your own copy", 2),
        ("Report it to the template owner", 3),
        ("Trace the formula, fix it and notify the team", 4),
    ]),
    ("TEKNIS", "A new regulation changes a procedure you run weekly. How do you respond?", [
        ("Keep using the old procedure", 1),
        ("Wait for an official training session", 2),
        ("Read the regulation and adjust your own work", 3),
        ("Adjust the procedure and document the change for colleagues", 4),
    ]),
    ("TEKNIS", "You are asked to use an unfamiliar application for a deadline tomorrow.", [
        ("Decline the task", 1),
        ("Ask a colleague to do it for you", 2),
        ("Learn the basics needed for the task", 3),
        ("Learn it, finish the task and share notes with the team", 4),
    ]),
    ("TEKNIS", "Data you received from another unit contains obvious errors.", [
        ("Use it as it is", 1),
        ("Silently correct what you can", 2),
        ("Return it with a request to correct it", 3),
        ("List the errors, agree on corrections and a check for next time", 4),
    ]),
    ("MANAJERIAL", "Your team misses a target because of unclear task division.", [
        ("Blame the team members", 1),
        ("Take over the remaining work yourself", 2),
        ("Reassign tasks for the next period", 3),
        ("Review roles with the team and set clear responsibilities", 4),
    ]),
    ("MANAJERIAL", "Two priorities from different superiors conflict.", [
        ("Pick the one you like", 1),
        ("Try to do both at half effort", 2),
        ("Ask your direct superior which comes first", 3),
        ("Bring both superiors the trade-offs and agree on an order", 4),
    ]),
    ("MANAJERIAL", "A subordinate repeatedly submits work late.", [
        ("Reprimand them in front of others", 1),
        ("Do nothing to avoid conflict", 2),
        ("Give a formal warning", 3),
        ("Discuss the causes privately and agree on a plan", 4),
    ]),
    ("MANAJERIAL", "Your superior asks you to alter a report to look better.", [
        ("Do as asked", 1),
        ("Disagree silently but comply", 2),
        ("Refuse without explanation", 3),
        ("Explain the risks and propose an accurate presentation", 4),
    ]),
    ("SOSIAL KULTURAL", "A new colleague from another region struggles to fit in.", [
        ("Leave them alone", 1),
        ("Greet them when convenient", 2),
        ("Invite them to team lunches", 3),
        ("Help them learn the work culture and introduce them around", 4),
    ]),
    ("SOSIAL KULTURAL", "A member of the public complains loudly at the service desk.", [
        ("Ask security to remove them", 1),
        ("Tell them to come back later", 2),
        ("Listen and forward the complaint", 3),
        ("Listen calmly, resolve what you can and follow up", 4),
    ]),
    ("SOSIAL KULTURAL", "Colleagues joke about another colleague's religion.", [
        ("Join in", 1),
        ("Laugh to fit in", 2),
        ("Stay out of it", 3),
        ("Remind them politely to respect differences", 4),
    ]),
    ("SOSIAL KULTURAL", "A community event clashes with your planned day off.", [
        ("Skip it without telling anyone", 1),
        ("Attend reluctantly", 2),
        ("Help with preparation beforehand", 3),
        ("Rearrange your plans and take part", 4),
    ]),
    ("WAWANCARA", "Why do you want to become a civil servant?", [
        ("Job security", 1),
        ("Family expectations", 2),
        ("To develop my career", 3),
        ("To serve the public with my skills", 4),
    ]),
    ("WAWANCARA", "How do you handle criticism of your work?", [
        ("Defend my work", 1),
        ("Accept it without reflection", 2),
        ("Consider it and improve where needed", 3),
        ("Ask for specifics and use them to improve", 4),
    ]),
    ("WAWANCARA", "What would you do in your first month on the job?", [
        ("Wait for instructions", 1),
        ("Follow my predecessor's notes", 2),
        ("Learn procedures and meet colleagues", 3),
        ("Learn procedures, meet stakeholders and set goals", 4),
    ]),
    ("WAWANCARA", "You made a mistake that affected a colleague's work.", [
        ("Hide it", 1),
        ("Wait for it to be noticed", 2),
        ("Apologise", 3),
        ("Admit it, fix it and prevent recurrence", 4),
    ]),
]


def build_sample_bank() -> list[dict]:
    """문제 은행 원본 데이터 (id는 1부터, 보기 id는 전체에서 고유)."""
    bank = []
    option_id = 1
    for qid, (category, text, options) in enumerate(_RAW, start=1):
        opts = []
        for option_text, score in options:
            opts.append({"id": option_id, "option_text": option_text, "score": score})
            option_id += 1
        bank.append({"id": qid, "category": category, "question_text": text, "options": opts})
    return bank
