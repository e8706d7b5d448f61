"""Fixed instructions sent to the language model."""

import json

REFUSAL_SENTENCE = "I cannot answer that based on the provided documents."
FALLBACK_SENTENCE = "This information is not contained in the documents."


def build_cv_parse_prompt(text: str) -> str:
    return f"""
You are extracting structured CV data.

Convert the resume text into ONE JSON object that follows this schema exactly:

{{
  "person": {{
    "name": "",
    "title": "",
    "location": "",
    "summary": ""
  }},
  "skills": [],
  "experience": [
    {{
      "organization": "",
      "role": "",
      "start": "",
      "end": "",
      "tasks": [],
      "keywords": []
    }}
  ],
  "education": [],
  "certificates": [],
  "languages": []
}}

Rules:
- Include only information explicitly present in the text.
- Do not guess, infer or invent missing facts.
- If information is missing, use empty strings ("") or empty arrays ([]). Never use null.
- "skills" should contain short skill labels only.
- "experience[].tasks" should contain short bullet-like task statements.
- "experience[].keywords" should contain short technology/domain keywords from that role.
- Keep original wording where possible; light cleanup for readability is fine.
- Output ONLY the JSON object.
- No explanations, no markdown.

RESUME TEXT:
{text}
"""


def build_certificate_parse_prompt(text: str) -> str:
    return f"""
Extract certificate information from the text below.

Return ONLY a JSON object following this schema:

{{
  "title": "",
  "issuer": "",
  "date": ""
}}

Rules:
- Extract only what is explicitly stated.
- If a field is not present, leave it as "".
- Keep values short and clean (no extra commentary).
- If multiple certificate names appear, use the main/canonical title in "title".
- Do not invent missing details.
- Output ONLY the JSON object, no markdown.

CERTIFICATE TEXT:
{text}
"""


def build_chat_prompt(context: dict) -> str:
    """Closed-world instruction: the model may only use the evidence embedded below."""
    evidence = json.dumps(context, indent=2, ensure_ascii=False)
    return f"""
You answer recruiter questions about one candidate's application documents.

Available sources:
- structured profile data (person, skills, experience, projects, education, languages)
- certificates
- reference documents and additional notes written by the candidate

Rules:
- Use ONLY the information in the DOCUMENTS section below.
- You may summarize, explain, and draw direct logical inferences from the documents
  (for example, deriving a skill from a described task). Say when something is an inference.
- Never add outside facts or general knowledge about companies, schools or technologies.
- Never estimate or guess quantities (such as years of experience) that are not explicitly stated.
- Do not present speculation about personality, performance or seniority as fact.
- If the requested information cannot be derived from the documents, reply with exactly this
  sentence and nothing else: "{REFUSAL_SENTENCE}"

Answer style:
- Start with a direct answer to the question, then up to six short bullet points with supporting facts.
- Where useful, name the source of a statement: "Source: CV", "Source: Certificate", "Source: Notes".
- Format in Markdown.

DOCUMENTS:
{evidence}
"""
