"""
Conversational flow: profile building through tool calls, resume requests.
"""

from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from resumechat.config import Settings
from resumechat.models import ChatDecision, ChatResponse, Message, ProfileUpdate, ToolCall, UserProfile
from resumechat.services.ai_service import AIService
from resumechat.services.profile_service import ProfileService
from resumechat.services.resume_service import ResumeService
from resumechat.utils.logger import get_logger, log_banner

logger = get_logger(__name__)

UPDATE_PROFILE_TOOL = "updateUserProfile"

RESUME_REPLY = "I've generated your resume! Here it is."
PROFILE_UPDATED_REPLY = "I've updated your profile with that information. What's next?"
FALLBACK_REPLY = "I'm not sure how to respond to that. Could you try rephrasing?"

SYSTEM_PROMPT = f"""You are a helpful AI career assistant. Your goal is to help the user build their professional profile and generate resumes.
1. Engage in a friendly, natural conversation.
2. When the user provides information for their profile (skills, experience, education, projects, links, ...), add a tool call named '{UPDATE_PROFILE_TOOL}' to "tool_calls".
   Its "arguments" may contain: name, headline, phone, links (list of {{"label", "url"}}), summary, skills, experience, education, projects, extracurriculars, honors_and_awards.
3. IMPORTANT: pass ONLY the new information the user just gave you. The tool appends it to what the profile already holds, so never repeat existing profile content.
4. If the user provides a job description and explicitly asks to create a resume, set "is_resume_request" to true, put the full job description in "job_description" and a suitable title (e.g. "Software Engineer at Google") in "title". Do not add conversational text.
5. For all other interactions, put a conversational reply in "reply".
"""


class ChatService:
    """Run one chat turn against the LLM and act on its decision."""

    def __init__(
        self,
        settings: Settings,
        ai_service: AIService,
        profile_service: ProfileService,
        resume_service: ResumeService
    ):
        self.settings = settings
        self.ai_service = ai_service
        self.profile_service = profile_service
        self.resume_service = resume_service
        self.tools: Dict[str, Callable[[UserProfile, dict], UserProfile]] = {
            UPDATE_PROFILE_TOOL: self._update_user_profile,
        }

    def chat(
        self,
        history: List[Message],
        prompt: str,
        profile: UserProfile,
        save_resume: bool = True
    ) -> ChatResponse:
        """
        Handle one user message.

        Args:
            history: Earlier turns of the conversation
            prompt: The new user message
            profile: The user's current profile
            save_resume: Store a generated resume and return its id

        Returns:
            ChatResponse with a reply and, for resume requests, the LaTeX
        """
        log_banner(logger, f"💬 CHAT TURN ({self.ai_service.provider}/{self.ai_service.model})")
        logger.info(f"User {profile.uid}: {prompt[:200]}")

        profile_json = profile.model_dump_json()
        turns = [m.model_dump() for m in history]
        turns.append({"role": "assistant", "content": f"Here is the user's current profile: {profile_json}"})

        decision = self.ai_service.generate_structured(
            f"The user's prompt is: {prompt}.",
            ChatDecision,
            system_prompt=SYSTEM_PROMPT,
            temperature=self.settings.ai_settings.chat_temperature,
            history=turns,
        )

        if decision.is_resume_request and decision.job_description and decision.job_description.strip():
            return self._handle_resume_request(decision, profile, save_resume)

        if decision.tool_calls:
            updated = self._run_tools(decision.tool_calls, profile)
            if updated is not None:
                return ChatResponse(reply=PROFILE_UPDATED_REPLY, profile=updated)

        return ChatResponse(reply=(decision.reply or "").strip() or FALLBACK_REPLY)

    def _handle_resume_request(self, decision: ChatDecision, profile: UserProfile, save_resume: bool) -> ChatResponse:
        logger.info(f"📝 Resume requested: {decision.title or 'untitled'}")
        latex = self.resume_service.generate_resume_from_profile(
            profile.model_dump_json(indent=2),
            decision.job_description,
        )
        response = ChatResponse(
            reply=RESUME_REPLY,
            resume_content=latex,
            title=decision.title,
            job_description=decision.job_description,
        )
        if save_resume:
            resume = self.resume_service.save_generated_resume(
                profile.uid, decision.title, decision.job_description, latex
            )
            response.resume_id = resume.id
        return response

    def _run_tools(self, tool_calls: List[ToolCall], profile: UserProfile) -> Optional[UserProfile]:
        """Run every known tool call; return the updated profile if one ran."""
        updated = None
        for call in tool_calls:
            handler = self.tools.get(call.name)
            if handler is None:
                logger.warning(f"⚠️ Ignoring unknown tool call: {call.name}")
                continue
            try:
                updated = handler(updated or profile, call.arguments)
            except ValidationError as e:
                logger.warning(f"⚠️ Invalid arguments for {call.name}: {e}")
        return updated

    def _update_user_profile(self, profile: UserProfile, arguments: dict) -> UserProfile:
        update = ProfileUpdate.model_validate(arguments)
        logger.info(f"🛠️ {UPDATE_PROFILE_TOOL}: {sorted(update.model_dump(exclude_none=True))}")
        return self.profile_service.apply_tool_update(profile.uid, update)
