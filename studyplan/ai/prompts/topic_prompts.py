"""
Topic Extraction Prompts

Prompts for extracting an ordered topic list from a course syllabus.
"""


TOPIC_EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert educational content analyzer. "
    "Extract course topics from syllabi with high accuracy and consistency."
)


def build_topic_extraction_prompt(syllabus_text: str) -> str:
    return f"""Please analyze the following course syllabus and extract the main topics/units that will be covered in the course.

For each topic, provide:
1. A clear, concise title
2. Key concepts/keywords related to the topic

Format your response as a JSON object with this exact structure:
{{
  "topics": [
    {{
      "title": "Topic Title",
      "keywords": ["keyword1", "keyword2", "keyword3"]
    }}
  ]
}}

Guidelines:
- Extract 5-15 main topics (avoid too granular or too broad)
- Focus on learning objectives, not administrative details
- Order topics logically (introductory to advanced)
- Be consistent with naming conventions
- Skip course policies, grading, textbooks, etc.
- Include 2-5 relevant keywords per topic

Syllabus Text:
{syllabus_text}

Respond with valid JSON only:"""


def build_topic_extraction_messages(syllabus_text: str) -> list:
    """Chat messages (system + user) for one extraction request."""
    return [
        {"role": "system", "content": TOPIC_EXTRACTION_SYSTEM_PROMPT},
        {"role": "user", "content": build_topic_extraction_prompt(syllabus_text)},
    ]
