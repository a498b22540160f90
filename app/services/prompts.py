"""
Prompt builders for each generation task. Pure functions: structured context
in, prompt string out.
"""
import json
from typing import List

from app.schemas.profile import ChatContext, JobRoleContext, LearnerProgress, SkillGap

QUIZ_QUESTION_COUNT = 5


def build_gap_analysis_prompt(resume_text: str, job_role: JobRoleContext) -> str:
    if job_role.required_skills:
        skills_text = "Required Skills: " + ", ".join(s.skill for s in job_role.required_skills)
        instruction = "Analyze each required skill listed above and determine:"
    else:
        skills_text = "Required Skills: (Extract key skills from the job description below)"
        instruction = (
            "Based on the job description, identify the key skills needed for this role "
            "and analyze each one. For each skill, determine:"
        )

    return f"""You are a career advisor and skill gap analyzer. Analyze the following resume and compare it with the required job role.

Resume:
{resume_text}

Job Role: {job_role.title}
Description: {job_role.description}
{skills_text}

{instruction}
1. If the skill is mentioned in the resume
2. The current level of proficiency based on resume content
3. The required level for the job role
4. Priority level (critical/high/medium/low) based on importance
5. A brief description explaining the gap

Return ONLY a valid JSON object in this exact format (no markdown, no code blocks, no extra text):
{{
  "gaps": [
    {{
      "skill": "skill name",
      "currentLevel": "beginner/intermediate/advanced/expert/not_mentioned",
      "requiredLevel": "beginner/intermediate/advanced/expert",
      "priority": "low/medium/high/critical",
      "description": "brief explanation of the gap"
    }}
  ],
  "summary": "overall assessment of the candidate's readiness for this role"
}}

Return ONLY the JSON object, nothing else."""


def build_roadmap_prompt(gaps: List[SkillGap], job_role: JobRoleContext) -> str:
    gaps_json = json.dumps([g.to_json() for g in gaps])
    return f"""Create a personalized learning roadmap to bridge skill gaps for the following job role.

Job Role: {job_role.title}
Skill Gaps: {gaps_json}

Return exactly one step per skill gap, in the same order as the gaps above.

Provide a detailed roadmap in JSON format:
{{
  "steps": [
    {{
      "skill": "skill name",
      "resources": ["resource 1", "resource 2", "resource 3"],
      "estimatedTime": "X weeks/months",
      "description": "what to learn",
      "order": 1
    }}
  ],
  "totalDuration": "estimated total time"
}}

Only return valid JSON, no additional text."""


def build_resources_prompt(skill: str, level: str) -> str:
    return f"""Provide specific learning resources for learning "{skill}" at "{level}" level. Include:
- Online courses (with platform names)
- Books
- Tutorials
- Practice projects
- Communities

Return in JSON format:
{{
  "resources": [
    {{
      "type": "course/book/tutorial/project/community",
      "name": "resource name",
      "url": "if available",
      "description": "brief description"
    }}
  ]
}}

Only return valid JSON."""


def build_playlists_prompt(skill: str, level: str) -> str:
    return f"""Find the best FREE YouTube playlists and video series for learning "{skill}" at "{level}" level.

Return a JSON object with this exact format:
{{
  "playlists": [
    {{
      "title": "Playlist title",
      "channel": "Channel name",
      "url": "YouTube playlist URL (full URL starting with https://www.youtube.com)",
      "description": "Brief description of what this playlist covers",
      "videoCount": "Number of videos (if known)",
      "duration": "Total estimated duration (if known)"
    }}
  ]
}}

Focus on:
- Free, high-quality playlists
- Popular channels with good teaching
- Complete series/playlists (not single videos)
- Recent content (if possible)

Return ONLY valid JSON, no markdown, no code blocks."""


def build_quiz_prompt(skill: str, topic: str, level: str) -> str:
    return f"""Generate a quiz to test understanding of "{topic}" related to "{skill}" at "{level}" level.

Create exactly {QUIZ_QUESTION_COUNT} multiple-choice questions. Each question should have:
- A clear question
- 4 answer options (A, B, C, D)
- Only ONE correct answer
- Brief explanation for the correct answer

Return ONLY a valid JSON object in this exact format:
{{
  "questions": [
    {{
      "question": "Question text",
      "options": {{
        "A": "Option A text",
        "B": "Option B text",
        "C": "Option C text",
        "D": "Option D text"
      }},
      "correctAnswer": "A",
      "explanation": "Brief explanation of why this is correct"
    }}
  ]
}}

Make questions practical and relevant to real-world application. Return ONLY JSON, no markdown."""


def build_chat_prompt(message: str, context: ChatContext) -> str:
    return f"""You are a helpful career and upskilling assistant. The user is working on upskilling for a job role.

Context:
- Job Role: {context.job_role or 'Not selected'}
- Current Progress: {context.progress}%
- Skill Gaps: {context.skill_gaps or 'Not analyzed yet'}

User Question: {message}

Provide a helpful, encouraging, and actionable response. Be concise but thorough."""


def build_enhanced_chat_prompt(message: str, context: ChatContext, progress: LearnerProgress) -> str:
    completed = ", ".join(progress.completed_skills) or "None yet"
    in_progress = ", ".join(progress.in_progress_skills) or "None"

    return f"""You are an advanced AI career and upskilling assistant. You help users with research, learning, and career development.

User Context:
- Target Job Role: {context.job_role or 'Not selected'}
- Overall Progress: {context.progress}%
- Skill Gaps Identified: {context.skill_gaps}
- Completed Skills: {completed}
- Skills In Progress: {in_progress}
- Current Roadmap Steps: {progress.roadmap_step_count} steps

User Question: {message}

Provide a comprehensive, helpful response that:
1. Directly answers the question
2. If research-related, provide detailed insights and current best practices
3. If asking about next steps, recommend specific projects based on completed skills
4. If asking about learning, suggest practical resources and hands-on projects
5. Be encouraging and actionable

For project recommendations, suggest:
- Projects that build on completed skills
- Projects that help learn new skills from the roadmap
- Real-world applicable projects
- Projects with clear learning outcomes

Format your response clearly with:
- Main answer
- Detailed explanation (if research question)
- Actionable next steps
- Project suggestions (if relevant)

Be conversational, helpful, and specific."""
