"""Prompt templates for analysis, scenario generation and chat."""

from typing import List

VIDEO_ANALYSIS_PROMPTS = {
    "style": "このYouTuber動画のスタイルを分析してください。編集テクニック、話し方、雰囲気、構成を日本語でMarkdown形式で抽出してください。",
    "source": "この動画の内容を要約してください。主要なトピック、キーポイントを日本語でMarkdown形式で抽出してください。",
}

PDF_ANALYSIS_PROMPTS = {
    "style": "このPDFドキュメントのスタイルを分析してください。構成、トーン、フォーマット、重要なポイントを日本語でMarkdown形式で抽出してください。",
    "source": "このPDFドキュメントの内容を要約してください。主要なトピック、キーポイントを日本語でMarkdown形式で抽出してください。",
}

TEXT_ANALYSIS_PROMPTS = {
    "style": "以下のドキュメントのスタイルを分析してください。構成、トーン、フォーマット、重要なポイントを日本語でMarkdown形式で抽出してください。",
    "source": "以下のドキュメントの内容を要約してください。主要なトピック、キーポイントを日本語でMarkdown形式で抽出してください。",
}


def text_analysis_prompt(mode: str, content: str) -> str:
    """Instruction followed by the already-extracted document text."""
    return f"{TEXT_ANALYSIS_PROMPTS[mode]}\n\n{content}"


def chat_system_prompt(context_sources: List[str]) -> str:
    """System prompt grounding the chat assistant in the selected sources."""
    joined = "\n\n---\n\n".join(context_sources)
    return f"""あなたは動画制作支援AIアシスタントです。
以下のソース情報を元に、ユーザーの質問に答えてください。

ソース情報:
{joined}"""


def scenario_draft_prompt(styles: List[str], sources: List[str], chat_history: str) -> str:
    """First pass: a baseline scenario draft."""
    styles_text = "\n\n".join(styles)
    sources_text = "\n\n".join(sources)
    return f"""以下の情報を元に、YouTube動画のシナリオの**草案**を作成してください。

スタイル情報:
{styles_text}

ソース情報:
{sources_text}

ディスカッション履歴:
{chat_history}

まず基本的な構成でシナリオ草案を作成してください。後で改善のプロセスを経ますので、現時点で思いつくベースラインとしてのシナリオを作成してください。

構成:
1. 導入（フック）
2. 本論
3. まとめ

日本語でMarkdown形式で出力してください。"""


def scenario_refine_prompt(
    styles: List[str], sources: List[str], chat_history: str, draft: str
) -> str:
    """Second pass: critique the draft and rewrite it."""
    styles_text = "\n\n".join(styles)
    sources_text = "\n\n".join(sources)
    return f"""以下は、YouTube動画シナリオの**草案**です。

---
**【草案】**
{draft}
---

この草案を元に、より洗練された最終シナリオを作成してください。

**改善のポイント:**
1. 草案の弱点や不足している点を批判的に分析してください
2. 視聴者の没入感を高めるためのフック（導入）の工夫を検討してください
3. ストーリーテリングの観点から、情報の順序や構成を再評価してください
4. 具体的な表現や例を追加して、より魅力的な内容にしてください

**元の情報:**
スタイル情報:
{styles_text}

ソース情報:
{sources_text}

ディスカッション履歴:
{chat_history}

構成:
1. 導入（フック）- 視聴者の注意を強く引く工夫を入れる
2. 本論 - 具体的な例やエピソードを交える
3. まとめ - 行動を促す強い締めくくり

日本語でMarkdown形式で出力してください。"""
