from __future__ import annotations

CLINIC_PHONE = "06-6931-2391"

# Obstetric / gynecological danger signs, matched as case-folded substrings.
EMERGENCY_KEYWORDS = [
    "大量出血", "血が止まら", "血が止まり", "レバー状",
    "強い腹痛", "激しい腹痛",
    "意識", "もうろう", "けいれん",
    "呼吸が苦しい", "胸が痛い",
    "高熱", "39", "破水",
    "胎動が少ない", "胎動ない", "胎動減少",
    "失神", "耐えられない痛み",
]

EMERGENCY_MESSAGE = "\n".join([
    "⚠️ 現在の症状からは、**緊急性が高い可能性があります。**",
    "",
    "次のような状態に当てはまる場合は、**すぐに医療機関へ電話で相談し、受診をご検討ください。**",
    "・大量の出血がある、血が止まりにくい",
    "・我慢できないほどの強い腹痛や胸の痛みがある",
    "・意識がもうろうとしている、けいれんがある",
    "・高い熱が続いている（39℃前後など）",
    "・破水が疑われる、胎動が明らかに少ない  など",
    "",
    f"当院へのご相談は **{CLINIC_PHONE}**（番号非通知は不可） までお電話ください。",
    "夜間などで今すぐ対応が必要だと感じる場合は、**119番（救急要請）も検討してください。**",
])


_FOLDED_KEYWORDS = [k.casefold() for k in EMERGENCY_KEYWORDS]


def detect_emergency(text: str | None) -> bool:
    """Return True when the text mentions any danger sign."""
    if not text:
        return False
    folded = text.casefold()
    return any(keyword in folded for keyword in _FOLDED_KEYWORDS)
