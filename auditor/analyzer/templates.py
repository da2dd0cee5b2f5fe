"""
Prompt templates for the derived generation steps
"""

from auditor.analyzer.language import LocaleProfile

PROMPT_REQUEST_TEMPLATE = """{instruction}

Respond in {language_name}. Any suggested titles, descriptions or other copy must be
written in {language_name}, keeping special characters exactly as they appear on the page.

Webpage Data:
{payload}"""

SCORES_TEMPLATE = """You are a senior SEO consultant. Based ONLY on the analysis results below,
rate the page in each category from 0 to 100.

Return ONLY a JSON object with exactly these keys and integer values:
{{"technical": 0, "content": 0, "performance": 0, "user_experience": 0, "accessibility": 0}}

Use null for a category the analysis gives you no evidence about.

URL: {url}
Analysis Results:
{analysis}"""

SUMMARY_TEMPLATE = """Based ONLY on the SEO analysis results below, write a short, beginner-friendly
executive summary (at most 200 words) in {language_name}.

Structure:
- Your SEO situation: one or two sentences on the overall health of the page
- Quick wins: up to three tasks that take under 30 minutes each
- Important fixes: up to three fixes for this week
- Expected results: what improves once these are done

Use simple language and explain why each action helps.

URL: {url}
Analysis Results:
{analysis}"""

RECOMMENDATIONS_TEMPLATE = """Based ONLY on the SEO analysis results below, provide 5-10 prioritized,
beginner-friendly recommendations.

Write explanations in {language_name}. Any example title must be {title_min}-{title_max} characters
and any example meta description {desc_min}-{desc_max} characters, written in {language_name}.

Return ONLY a JSON array in this format:
[
  {{
    "title": "Clear description of what to do",
    "priority": "critical|high|medium|low",
    "category": "technical|content|performance|accessibility|user_experience",
    "impact": "high|medium|low",
    "effort": "low|medium|high",
    "difficulty": "beginner|intermediate|advanced",
    "why_it_matters": "Why this helps SEO",
    "expected_outcome": "Specific, measurable improvement"
  }}
]

URL: {url}
Analysis Results:
{analysis}"""


def render_prompt_request(instruction: str, language_name: str, payload: str) -> str:
    return PROMPT_REQUEST_TEMPLATE.format(
        instruction=instruction, language_name=language_name, payload=payload
    )


def render_scores(url: str, analysis: str) -> str:
    return SCORES_TEMPLATE.format(url=url, analysis=analysis)


def render_summary(url: str, analysis: str, language_name: str) -> str:
    return SUMMARY_TEMPLATE.format(url=url, analysis=analysis, language_name=language_name)


def render_recommendations(
    url: str, analysis: str, language_name: str, locale: LocaleProfile
) -> str:
    return RECOMMENDATIONS_TEMPLATE.format(
        url=url,
        analysis=analysis,
        language_name=language_name,
        title_min=locale.title_length[0],
        title_max=locale.title_length[1],
        desc_min=locale.description_length[0],
        desc_max=locale.description_length[1],
    )
