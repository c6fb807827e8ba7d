from __future__ import annotations

from kabu.models import MetricsReport, ReplyFailure

MSG_EMPTY_INPUT = "銘柄名またはコードを入力してください（例：7974 または 任天堂）"
MSG_NOT_FOUND = "銘柄名またはコードが認識できません（例：7974 または 任天堂）"
MSG_FETCH_FAILED = "データ取得に失敗しました。証券コードを確認してください。"

FAILURE_MESSAGES: dict[ReplyFailure, str] = {
    ReplyFailure.EMPTY_INPUT: MSG_EMPTY_INPUT,
    ReplyFailure.NOT_FOUND: MSG_NOT_FOUND,
    ReplyFailure.FETCH_FAILED: MSG_FETCH_FAILED,
}


def format_report(report: MetricsReport) -> str:
    return (
        f"📈 {report.name}\n"
        f"株価：{report.price}円\n"
        f"PER：{report.per}倍　PBR：{report.pbr}倍\n"
        f"EPS：{report.eps}　配当金：{report.dividend_rate}円\n"
        f"利回り：{report.dividend_yield_pct}%\n"
        f"ROE：{report.roe_pct}%\n"
        f"BPS：{report.bps}　時価総額：{report.market_cap}"
    )


def render_reply(result: MetricsReport | ReplyFailure) -> str:
    if isinstance(result, ReplyFailure):
        return FAILURE_MESSAGES[result]
    return format_report(result)
