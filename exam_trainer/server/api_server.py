"""FastAPI server that exposes the student trainer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from exam_trainer.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    SESSION_COOKIE,
    SESSION_COOKIE_MAX_AGE,
)
from exam_trainer.constants.quiz_constants import MODULE_CHOICES, QUESTION_COUNT_CHOICES, STUDY_GUIDE_KEY
from exam_trainer.core.errors import TrainerError
from exam_trainer.core.services.quiz_session import SessionState, SessionStateError
from exam_trainer.core.services.trainer_manager import (
    AuthenticationRequiredError,
    SessionView,
    TrainerManager,
)

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid or expired access code."

_STUDENT_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Exam Trainer</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #f2f4f7; color: #1f2937; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; align-items: center; gap: 1rem; }
      .card { width: 100%; max-width: 760px; box-sizing: border-box; background: #ffffff; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.08); }
      .hidden { display: none !important; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #0b79d0; color: #fff; cursor: pointer; }
      .primary-button:hover { background: #0968b4; }
      .primary-button:disabled { opacity: 0.6; cursor: not-allowed; }
      .secondary-button { border: 1px solid #cbd5e1; border-radius: 0.75rem; padding: 0.75rem 1.25rem; font-size: 1rem; background: #fff; color: #1f2937; cursor: pointer; }
      .link-button { border: none; background: none; color: #0b79d0; cursor: pointer; padding: 0; font-size: 0.95rem; }
      input, select { font-size: 1rem; padding: 0.6rem; border: 1px solid #cbd5e1; border-radius: 0.5rem; }
      .row { display: flex; gap: 0.75rem; flex-wrap: wrap; align-items: center; margin: 0.75rem 0; }
      .error { color: #b91c1c; min-height: 1.25rem; }
      .notice { color: #475569; min-height: 1.25rem; }
      .banner { background: #fee2e2; color: #991b1b; border-radius: 0.5rem; padding: 0.75rem 1rem; display: flex; justify-content: space-between; gap: 1rem; }
      #question-text { font-size: 1.15rem; line-height: 1.6; white-space: pre-line; margin: 1rem 0; }
      #question-image { max-width: 100%; border-radius: 0.5rem; }
      .options { display: flex; flex-direction: column; gap: 0.6rem; }
      .option-button { text-align: left; white-space: pre-line; border: 2px solid #cbd5e1; border-radius: 0.75rem; padding: 0.9rem 1rem; font-size: 1rem; background: #fff; color: #1f2937; cursor: pointer; }
      .option-button.selected { border-color: #0b79d0; background: #e0f2fe; }
      .dots { display: flex; flex-wrap: wrap; gap: 0.35rem; }
      .dot { width: 2rem; height: 2rem; border-radius: 999px; border: 1px solid #cbd5e1; background: #fff; cursor: pointer; }
      .dot.answered { background: #bae6fd; }
      .dot.current { border: 2px solid #0b79d0; font-weight: 700; }
      .overlay { position: fixed; inset: 0; background: rgba(15, 23, 42, 0.45); display: flex; align-items: center; justify-content: center; }
      .score { font-size: 2.5rem; font-weight: 700; }
      .passed { color: #15803d; }
      .failed { color: #b91c1c; }
      .review-item { border-top: 1px solid #e2e8f0; padding: 1rem 0; }
      .review-option { padding: 0.4rem 0.75rem; border-radius: 0.5rem; margin: 0.25rem 0; white-space: pre-line; }
      .correctly_selected { background: #dcfce7; border: 1px solid #16a34a; }
      .incorrectly_selected { background: #fee2e2; border: 1px solid #dc2626; }
      .missed_correct { background: #fef9c3; border: 1px dashed #ca8a04; }
      .neutral { background: #f8fafc; border: 1px solid #e2e8f0; }
    </style>
  </head>
  <body>
    <section class="card" id="login-card">
      <h1>Exam Trainer</h1>
      <p>Enter your personal access code to start.</p>
      <div class="row">
        <input id="code-input" placeholder="e.g. MUTIG-PFOTE-417" autocomplete="off" />
        <button id="login-button" class="primary-button">Log in</button>
      </div>
      <p id="login-error" class="error"></p>
      <button id="forgot-toggle" class="link-button">Forgot your access code?</button>
      <div id="forgot-form" class="hidden">
        <div class="row">
          <input id="email-input" type="email" placeholder="Your e-mail address" />
          <button id="request-button" class="secondary-button">Send code</button>
        </div>
        <p id="request-notice" class="notice"></p>
      </div>
    </section>

    <section class="card hidden" id="config-card">
      <h2>Start a practice exam</h2>
      <div id="error-banner" class="banner hidden">
        <span id="error-text"></span>
        <button id="dismiss-button" class="link-button">Dismiss</button>
      </div>
      <div class="row">
        <label>Questions <select id="count-select"></select></label>
        <label>Module <select id="module-select"></select></label>
      </div>
      <div class="row">
        <button id="start-button" class="primary-button">Start</button>
        <a href="/study-guide" target="_blank" rel="noopener">Download the study guide</a>
        <button class="secondary-button logout-button">Log out</button>
      </div>
      <p id="loading-notice" class="notice"></p>
    </section>

    <section class="card hidden" id="quiz-card">
      <div class="row" style="justify-content: space-between;">
        <strong id="progress-label"></strong>
        <span id="category-label" class="notice"></span>
      </div>
      <div id="question-text"></div>
      <img id="question-image" class="hidden" alt="" />
      <p id="multi-hint" class="notice hidden">Several answers may be correct. Select all that apply.</p>
      <div id="options-container" class="options"></div>
      <div class="row" style="justify-content: space-between;">
        <button id="prev-button" class="secondary-button">Back</button>
        <button id="next-button" class="secondary-button">Next</button>
      </div>
      <div id="dots" class="dots"></div>
      <div class="row">
        <button id="submit-button" class="primary-button">Submit exam</button>
      </div>
      <p id="quiz-error" class="error"></p>
    </section>

    <div id="confirm-overlay" class="overlay hidden">
      <div class="card" style="max-width: 420px;">
        <h3>Submit exam?</h3>
        <p id="confirm-text"></p>
        <div class="row">
          <button id="confirm-button" class="primary-button">Submit</button>
          <button id="cancel-button" class="secondary-button">Keep working</button>
        </div>
      </div>
    </div>

    <section class="card hidden" id="results-card">
      <h2>Your result</h2>
      <div id="score" class="score"></div>
      <p id="score-detail"></p>
      <p id="pass-label"></p>
      <div class="row">
        <button id="restart-button" class="primary-button">New exam</button>
        <button class="secondary-button logout-button">Log out</button>
      </div>
      <div id="review"></div>
    </section>

    <script>
      const cards = {
        login: document.getElementById('login-card'),
        config: document.getElementById('config-card'),
        quiz: document.getElementById('quiz-card'),
        results: document.getElementById('results-card'),
      };
      const codeInput = document.getElementById('code-input');
      const loginError = document.getElementById('login-error');
      const requestNotice = document.getElementById('request-notice');
      const countSelect = document.getElementById('count-select');
      const moduleSelect = document.getElementById('module-select');
      const errorBanner = document.getElementById('error-banner');
      const loadingNotice = document.getElementById('loading-notice');
      const optionsContainer = document.getElementById('options-container');
      const quizError = document.getElementById('quiz-error');
      const confirmOverlay = document.getElementById('confirm-overlay');
      let selectsFilled = false;

      function setVisibility(element, isVisible) {
        if (!element) return;
        if (isVisible) {
          element.classList.remove('hidden');
        } else {
          element.classList.add('hidden');
        }
      }

      function showCard(name) {
        Object.entries(cards).forEach(([key, card]) => setVisibility(card, key === name));
      }

      async function post(path, body) {
        const options = { method: 'POST', headers: { 'Content-Type': 'application/json' } };
        if (body !== undefined) {
          options.body = JSON.stringify(body);
        }
        const response = await fetch(path, options);
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          const error = new Error(payload.detail || 'Request failed.');
          error.status = response.status;
          throw error;
        }
        return payload;
      }

      async function act(path, body) {
        quizError.textContent = '';
        try {
          render(await post(path, body));
        } catch (error) {
          if (error.status === 401) {
            await refresh();
            return;
          }
          quizError.textContent = error.message;
        }
      }

      async function refresh() {
        try {
          const response = await fetch('/state');
          render(await response.json());
        } catch (error) {
          console.error('Error fetching state:', error);
        }
      }

      function fillSelects(view) {
        if (selectsFilled) return;
        view.question_count_choices.forEach(count => {
          const option = document.createElement('option');
          option.value = count;
          option.textContent = count;
          countSelect.appendChild(option);
        });
        const all = document.createElement('option');
        all.value = '';
        all.textContent = 'All modules';
        moduleSelect.appendChild(all);
        view.module_choices.forEach(name => {
          const option = document.createElement('option');
          option.value = name;
          option.textContent = name;
          moduleSelect.appendChild(option);
        });
        selectsFilled = true;
      }

      function render(view) {
        setVisibility(confirmOverlay, false);
        if (!view.authenticated) {
          showCard('login');
          return;
        }
        fillSelects(view);
        if (view.state === 'config') {
          showCard('config');
          setVisibility(errorBanner, Boolean(view.error));
          document.getElementById('error-text').textContent = view.error || '';
          document.getElementById('start-button').disabled = view.busy;
          loadingNotice.textContent = view.busy ? 'Loading questions…' : '';
        } else if (view.state === 'quiz') {
          showCard('quiz');
          renderQuiz(view.quiz);
        } else {
          showCard('results');
          renderResults(view.results);
        }
      }

      function renderQuiz(quiz) {
        const question = quiz.question;
        document.getElementById('progress-label').textContent = `Question ${quiz.current_index + 1} of ${quiz.total}`;
        document.getElementById('category-label').textContent = question.category || '';
        document.getElementById('question-text').textContent = question.question_text;
        const image = document.getElementById('question-image');
        setVisibility(image, Boolean(question.image_url));
        if (question.image_url) image.src = question.image_url;
        setVisibility(document.getElementById('multi-hint'), question.is_multi);
        optionsContainer.innerHTML = '';
        question.options.forEach((text, index) => {
          const button = document.createElement('button');
          button.className = 'option-button';
          if (quiz.selected.includes(index)) button.classList.add('selected');
          button.textContent = text;
          button.addEventListener('click', () => act('/quiz/answer', { question_index: quiz.current_index, option_index: index }));
          optionsContainer.appendChild(button);
        });
        document.getElementById('prev-button').disabled = quiz.current_index === 0;
        document.getElementById('next-button').disabled = quiz.current_index >= quiz.total - 1;
        const dots = document.getElementById('dots');
        dots.innerHTML = '';
        quiz.answered.forEach((answered, index) => {
          const dot = document.createElement('button');
          dot.className = 'dot';
          if (answered) dot.classList.add('answered');
          if (index === quiz.current_index) dot.classList.add('current');
          dot.textContent = index + 1;
          dot.addEventListener('click', () => act('/quiz/navigate', { index }));
          dots.appendChild(dot);
        });
        if (quiz.confirmation_pending) {
          document.getElementById('confirm-text').textContent = `You answered ${quiz.answered_count} of ${quiz.total} questions.`;
          setVisibility(confirmOverlay, true);
        }
      }

      function renderResults(results) {
        const score = document.getElementById('score');
        score.textContent = `${results.percentage}%`;
        score.className = `score ${results.passed ? 'passed' : 'failed'}`;
        document.getElementById('score-detail').textContent = `${results.correct_count} of ${results.total_count} questions answered correctly.`;
        document.getElementById('pass-label').textContent = results.passed
          ? `Passed (at least ${results.passing_percentage}% required).`
          : `Not passed yet (${results.passing_percentage}% required). Keep practising!`;
        const review = document.getElementById('review');
        review.innerHTML = '';
        results.questions.forEach((item, index) => {
          const block = document.createElement('div');
          block.className = 'review-item';
          const title = document.createElement('p');
          title.style.whiteSpace = 'pre-line';
          title.textContent = `${index + 1}. ${item.is_correct ? '✔' : '✘'} ${item.question_text}`;
          block.appendChild(title);
          item.options.forEach((text, optionIndex) => {
            const option = document.createElement('div');
            option.className = `review-option ${item.option_states[optionIndex]}`;
            option.textContent = text;
            block.appendChild(option);
          });
          review.appendChild(block);
        });
      }

      document.getElementById('login-button').addEventListener('click', async () => {
        loginError.textContent = '';
        try {
          render(await post('/login', { code: codeInput.value }));
          codeInput.value = '';
        } catch (error) {
          loginError.textContent = error.message;
        }
      });
      codeInput.addEventListener('keydown', event => {
        if (event.key === 'Enter') document.getElementById('login-button').click();
      });
      document.getElementById('forgot-toggle').addEventListener('click', () => {
        document.getElementById('forgot-form').classList.toggle('hidden');
      });
      document.getElementById('request-button').addEventListener('click', async () => {
        const email = document.getElementById('email-input').value;
        requestNotice.textContent = 'Sending…';
        await post('/access-code/request', { email }).catch(() => ({}));
        requestNotice.textContent = 'If this address is registered, you will receive your code by e-mail shortly.';
      });
      document.querySelectorAll('.logout-button').forEach(button => {
        button.addEventListener('click', () => act('/logout'));
      });
      document.getElementById('dismiss-button').addEventListener('click', () => act('/quiz/dismiss-error'));
      document.getElementById('start-button').addEventListener('click', async () => {
        document.getElementById('start-button').disabled = true;
        loadingNotice.textContent = 'Loading questions…';
        await act('/quiz/start', { count: Number(countSelect.value), module: moduleSelect.value || null });
      });
      document.getElementById('prev-button').addEventListener('click', () => act('/quiz/navigate/previous'));
      document.getElementById('next-button').addEventListener('click', () => act('/quiz/navigate/next'));
      document.getElementById('submit-button').addEventListener('click', () => act('/quiz/submit'));
      document.getElementById('confirm-button').addEventListener('click', () => act('/quiz/submit/confirm'));
      document.getElementById('cancel-button').addEventListener('click', () => act('/quiz/submit/cancel'));
      document.getElementById('restart-button').addEventListener('click', () => act('/quiz/restart'));

      refresh();
    </script>
  </body>
</html>
"""


class LoginPayload(BaseModel):
    """Payload schema for the access-code login."""

    code: str


class StartPayload(BaseModel):
    """Payload schema for starting a quiz."""

    count: int
    module: str | None = None


class AnswerPayload(BaseModel):
    """Payload schema for a click on an option."""

    question_index: int
    option_index: int


class NavigatePayload(BaseModel):
    index: int


class AccessCodeRequestPayload(BaseModel):
    email: str = ""


def _get_manager_dependency(manager: TrainerManager):
    def dependency() -> TrainerManager:
        return manager

    return dependency


def _session_token(request: Request) -> str | None:
    return request.cookies.get(SESSION_COOKIE)


@contextmanager
def _http_errors() -> Iterator[None]:
    """Translate domain exceptions into HTTP status codes."""
    try:
        yield
    except AuthenticationRequiredError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (ValueError, IndexError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except TrainerError as exc:
        raise HTTPException(status_code=503, detail=exc.user_message) from exc


def _client_ip(request: Request, trust_proxy_headers: bool) -> str | None:
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip() or None
        connecting = request.headers.get("cf-connecting-ip")
        if connecting:
            return connecting.strip()
    return request.client.host if request.client else None


def _quiz_payload(view: SessionView) -> dict[str, object]:
    question = view.questions[view.current_index]
    return {
        "current_index": view.current_index,
        "total": len(view.questions),
        "answered_count": view.answered_count,
        "answered": [bool(selection) for selection in view.user_answers],
        "confirmation_pending": view.confirmation_pending,
        "selected": list(view.user_answers[view.current_index]),
        "question": {
            "question_text": question.question_text,
            "options": list(question.options),
            "is_multi": question.is_multi,
            "category": question.category,
            "image_url": question.image_url,
        },
    }


def _results_payload(view: SessionView) -> dict[str, object]:
    outcome = view.outcome
    assert outcome is not None
    return {
        "correct_count": outcome.correct_count,
        "total_count": outcome.total_count,
        "percentage": outcome.percentage,
        "passed": view.passed,
        "passing_percentage": view.passing_percentage,
        "questions": [
            {
                "question_text": question.question_text,
                "options": list(question.options),
                "selected": list(selection),
                "is_correct": result.is_correct,
                "option_states": [state.value for state in result.option_states],
            }
            for question, selection, result in zip(view.questions, view.user_answers, outcome.per_question)
        ],
    }


def _state_payload(manager: TrainerManager, token: str | None) -> dict[str, object]:
    payload: dict[str, object] = {
        "authenticated": False,
        "question_count_choices": list(QUESTION_COUNT_CHOICES),
        "module_choices": list(MODULE_CHOICES),
    }
    if not manager.is_authenticated(token):
        return payload
    try:
        view = manager.get_view(token)
    except AuthenticationRequiredError:
        # Logged out by another request in the meantime.
        return payload
    payload.update(
        {
            "authenticated": True,
            "state": view.state.value,
            "busy": view.is_busy,
            "error": view.error,
            "quiz": _quiz_payload(view) if view.state is SessionState.QUIZ else None,
            "results": _results_payload(view) if view.state is SessionState.RESULTS else None,
        }
    )
    return payload


def create_api_app(manager: TrainerManager, trust_proxy_headers: bool = False) -> FastAPI:
    """Create a FastAPI application wired to the provided trainer manager."""
    app = FastAPI(title="ExamTrainer API", version="0.1.0")
    manager_dep = _get_manager_dependency(manager)

    @app.get("/", response_class=HTMLResponse)
    def serve_student_page() -> str:
        return _STUDENT_PAGE_HTML

    @app.post("/login")
    def login(
        payload: LoginPayload,
        request: Request,
        response: Response,
        manager: TrainerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        token = _session_token(request) or manager.new_token()
        with _http_errors():
            accepted = manager.login(token, payload.code)
        if not accepted:
            raise HTTPException(status_code=401, detail=INVALID_CODE_MESSAGE)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=token,
            max_age=SESSION_COOKIE_MAX_AGE,
            samesite="lax",
            httponly=True,
        )
        return _state_payload(manager, token)

    @app.post("/logout")
    def logout(
        request: Request,
        response: Response,
        manager: TrainerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        manager.logout(_session_token(request))
        response.delete_cookie(SESSION_COOKIE)
        return _state_payload(manager, None)

    @app.get("/state")
    def get_state(request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        return _state_payload(manager, _session_token(request))

    @app.post("/quiz/start")
    def start_quiz(
        payload: StartPayload,
        request: Request,
        manager: TrainerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.start_quiz(token, payload.count, payload.module)
        return _state_payload(manager, token)

    @app.post("/quiz/answer")
    def select_answer(
        payload: AnswerPayload,
        request: Request,
        manager: TrainerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.select_answer(token, payload.question_index, payload.option_index)
        return _state_payload(manager, token)

    @app.post("/quiz/navigate")
    def navigate(
        payload: NavigatePayload,
        request: Request,
        manager: TrainerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.navigate(token, payload.index)
        return _state_payload(manager, token)

    @app.post("/quiz/navigate/{direction}")
    def step(direction: str, request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            if direction == "next":
                manager.next_question(token)
            elif direction == "previous":
                manager.previous_question(token)
            else:
                raise ValueError(f"Unknown direction '{direction}'.")
        return _state_payload(manager, token)

    @app.post("/quiz/submit")
    def request_submit(request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.request_submit(token)
        return _state_payload(manager, token)

    @app.post("/quiz/submit/confirm")
    def confirm_submit(request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.confirm_submit(token)
        return _state_payload(manager, token)

    @app.post("/quiz/submit/cancel")
    def cancel_submit(request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.cancel_submit(token)
        return _state_payload(manager, token)

    @app.post("/quiz/restart")
    def restart(request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.restart(token)
        return _state_payload(manager, token)

    @app.post("/quiz/dismiss-error")
    def dismiss_error(request: Request, manager: TrainerManager = Depends(manager_dep)) -> dict[str, object]:
        token = _session_token(request)
        with _http_errors():
            manager.dismiss_error(token)
        return _state_payload(manager, token)

    @app.get("/study-guide")
    def download_study_guide(request: Request, manager: TrainerManager = Depends(manager_dep)) -> Response:
        if not manager.is_authenticated(_session_token(request)):
            raise HTTPException(status_code=401, detail="Please log in with your access code.")
        with _http_errors():
            data = manager.fetch_study_guide()
        if data is None:
            raise HTTPException(status_code=404, detail="No study guide has been published yet.")
        return Response(
            content=data,
            media_type="application/pdf",
            headers={"Content-Disposition": f'inline; filename="{STUDY_GUIDE_KEY}"'},
        )

    @app.post("/access-code/request")
    def request_access_code(
        payload: AccessCodeRequestPayload,
        request: Request,
        manager: TrainerManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            manager.request_access_code(payload.email, _client_ip(request, trust_proxy_headers))
        except Exception:
            # The answer must not depend on what happened behind it.
            logger.exception("Access code self-service failed")
        return {"ok": True}

    return app


def start_api_server(
    manager: TrainerManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    trust_proxy_headers: bool = False,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(manager, trust_proxy_headers=trust_proxy_headers)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ExamTrainerApiServer", daemon=True)
    thread.start()
    return thread
