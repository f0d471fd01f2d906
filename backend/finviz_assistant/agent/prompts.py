"""
Prompt templates and fixed user-facing texts for the visualization agent.
Following Factor 2: Own Your Prompts.
"""

ASSISTANT_PERSONA = (
    "You are a highly specialized AI assistant for financial data visualization. "
    "Your primary function is to help users display financial information as "
    "tables, charts or lists. You are NOT a general knowledge chatbot."
)

INTENT_PROMPT_TEMPLATE = """{persona}

Analyze the user's message: "{utterance}"

Determine the user's intent using these definitions:

1. "financial_data": the user wants to *see*, *display* or *visualize* financial data
   ("show me data", "display stocks", "chart financials", "table prices", "list companies").
   - "data_format" is "table", "chart" or "list" ONLY when the user names it explicitly.
     Otherwise it MUST be "none". Never infer a format.
   - If the user mentions a company ("AAPL", "Google"), a sector ("tech sector") or a
     financial metric ("volume"), copy that exact phrase into "data_query".
     Otherwise "data_query" is "none".
   - "create a component" (or similar requests to build a visual element) is
     "financial_data" with "data_format": "none" and "data_query": "none".

2. "general_qa": anything that is not a request to display data, including definitions
   ("what is stock volume?"), explanations of financial concepts, and questions unrelated
   to finance. Messages starting with or containing "what is", "explain", "tell me about",
   "define" or "how to" (asking about a concept) are almost always "general_qa".

Respond with a fenced JSON block only:
```json
{{
  "intent_type": "financial_data" | "general_qa",
  "data_format": "table" | "chart" | "list" | "none",
  "data_query": "<exact phrase>" | "none"
}}
```"""

DATA_PROMPT_GENERIC = (
    "Generate realistic-looking financial stock data for major companies "
    "(e.g., Apple, Google, Microsoft, Amazon). Provide the data as a JSON array of "
    "objects. Each object must have 'symbol' (string), 'price' (number, up to 2 "
    "decimal places) and 'volume' (integer). Aim for 5-10 entries. Respond with ONLY "
    "the JSON array, no other text."
)

DATA_PROMPT_SCOPED_TEMPLATE = """Generate financial data ONLY for the user's query: "{subject}". Do not include other companies or symbols.
- If the query is a ticker symbol (e.g., AAPL, GOOGL), use only that symbol for every entry.
- If the query is a company name (e.g., Apple, Microsoft), infer its symbol and use it for every entry.
- If the query is a sector (e.g., "tech sector", "automotive"), use 2-3 prominent companies strictly within that sector.
- If the query is a financial metric (e.g., "volume", "P/E ratio"), illustrate that metric across a few relevant companies.
Provide the data as a JSON array of objects. Each object must have 'symbol' (string), 'price' (number, up to 2 decimal places) and 'volume' (integer). Aim for 3-5 entries. Respond with ONLY the JSON array, with no leading or trailing text."""

DOMAIN_GATE_PROMPT_TEMPLATE = """{persona} Besides visualization requests you may give brief, direct answers about financial concepts and definitions.

Analyze the user's message: "{utterance}"

Decide whether it is relevant to your domain:
- IN_DOMAIN: financial concepts or definitions ("what is stock volume?", "explain market capitalization"), or requests about financial data, companies, or how to visualize data.
- OUT_OF_DOMAIN: completely unrelated to finance, data or visualization (cooking, sports scores, weather, history, non-financial news, personal opinions, general science).

Respond with only "IN_DOMAIN" or "OUT_OF_DOMAIN"."""

GENERAL_ANSWER_PROMPT_TEMPLATE = """Answer the following financial or data-related question concisely, keeping in mind your role as a financial data visualization assistant. If the question goes beyond simple definitions or direct financial concepts, say that it is outside your core focus but give a brief, helpful answer if possible.

Question: "{utterance}"
"""

# ===== Fixed response texts =====

ASK_FORMAT_TEXT = "Please specify the format you would like: table, chart, or list."

ASK_DATA_SUBJECT_TEXT = (
    "For which companies, sectors, or financial metrics are you interested in "
    "seeing data? Please type your query."
)

OUT_OF_DOMAIN_TEXT = (
    "I apologize, but my current capabilities are focused on financial data "
    "visualization and related queries. Please ask me about financial data, "
    "companies, or how to display data."
)

GENERAL_ANSWER_FAILED_TEXT = (
    "Sorry, I could not answer that. It might be outside my core financial data "
    "visualization scope or an error occurred."
)

DATA_CAPTION_TEMPLATE = (
    'Responding to your query: "{query}". '
    "Here is the financial data in {format} format."
)


def build_intent_prompt(utterance: str) -> str:
    return INTENT_PROMPT_TEMPLATE.format(persona=ASSISTANT_PERSONA, utterance=utterance)


def build_data_prompt(subject: str | None) -> str:
    if subject:
        return DATA_PROMPT_SCOPED_TEMPLATE.format(subject=subject)
    return DATA_PROMPT_GENERIC


def build_domain_gate_prompt(utterance: str) -> str:
    return DOMAIN_GATE_PROMPT_TEMPLATE.format(
        persona=ASSISTANT_PERSONA, utterance=utterance
    )


def build_general_answer_prompt(utterance: str) -> str:
    return GENERAL_ANSWER_PROMPT_TEMPLATE.format(utterance=utterance)
