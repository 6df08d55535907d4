"""ELP Hub admin panel.

Features:
- AI Hub: every hub action (text, translation, documents, image, NLP) behind one form
- Competitor analysis with Gemini, Groq and Claude, plus Gemini complement
- Lead triage with sentiment and intent classification
- Semantic search over pasted documents
- Reply e-mails and next-signer notifications
- Usage analytics with Plotly charts
"""

from __future__ import annotations

import base64
import json
import logging
import sys
from pathlib import Path

import pandas as pd
import plotly.express as px
import streamlit as st
from dotenv import load_dotenv

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from elphub.analysis import CompetitorAnalyst
from elphub.config import Settings
from elphub.crud import SupabaseCRUD
from elphub.errors import HubError
from elphub.hub import AIHub
from elphub.keypool import KeyPool
from elphub.legal import LEGAL_FRAMEWORKS
from elphub.leads import LeadAnalyzer
from elphub.mailer import EmailService
from elphub.models import Action, DocumentType, Lead, ReplyType, SUPPORTED_LANGUAGES
from elphub.router import TextRouter
from elphub.scraper import CompetitorScraper
from elphub.search import SemanticSearch, relevance_label

load_dotenv()
logging.basicConfig(level=logging.INFO)

st.set_page_config(
    page_title="ELP Hub Admin",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stTabs [data-baseweb="tab-list"] { gap: 8px; }
    .stTabs [data-baseweb="tab"] {
        padding: 10px 24px;
        border-radius: 8px 8px 0 0;
        font-weight: 600;
    }
    div[data-testid="metric-container"] {
        background: linear-gradient(135deg, #1a274422, #2e7d3222);
        border: 1px solid #e0e0e0;
        border-radius: 10px;
        padding: 12px;
    }
</style>
""", unsafe_allow_html=True)

# ============================================================================
# Services (one key pool per server process)
# ============================================================================


@st.cache_resource
def load_services():
    settings = Settings.from_env()
    pool = KeyPool(settings.gemini_keys)
    hub = AIHub.from_settings(settings, router=TextRouter.from_settings(settings, gemini_pool=pool))
    crud = SupabaseCRUD.from_settings(settings) if settings.supabase_configured else None
    return {
        "settings": settings,
        "pool": pool,
        "hub": hub,
        "analyst": CompetitorAnalyst.from_settings(settings, gemini_pool=pool),
        "emails": EmailService.from_settings(settings),
        "crud": crud,
        "scraper": CompetitorScraper(),
    }


services = load_services()
settings: Settings = services["settings"]
hub: AIHub = services["hub"]


def run(label: str, fn, *args, **kwargs):
    """Call a hub operation under a spinner, showing HubErrors inline."""
    with st.spinner(label):
        try:
            return fn(*args, **kwargs)
        except HubError as e:
            st.error(f"{e.message} (HTTP {e.status_code})")
            return None


# ============================================================================
# Sidebar
# ============================================================================

with st.sidebar:
    st.markdown("### Providers")
    status = settings.key_status()
    st.metric("Gemini keys", services["pool"].status() if status["gemini_keys"] else "none")
    for name in ("groq", "anthropic", "huggingface", "firecrawl", "resend", "supabase"):
        st.markdown(f"{'🟢' if status[name] else '⚪'} {name}")
    st.divider()
    st.caption("HuggingFace e Groq são gratuitos. Anthropic é cobrado apenas como último recurso.")

tab_hub, tab_competitors, tab_leads, tab_search, tab_email, tab_analytics = st.tabs([
    "AI Hub", "Competitor Analysis", "Leads", "Semantic Search", "E-mail", "Analytics",
])

# ============================================================================
# TAB: AI Hub
# ============================================================================

with tab_hub:
    st.header("AI Hub")
    action = st.selectbox("Action", [a.value for a in Action])
    payload: dict = {"action": action}

    if action == Action.TEXT.value:
        payload["prompt"] = st.text_area("Prompt", height=150)
        payload["model_preference"] = st.selectbox("Provider", ["auto", "gemini", "groq", "anthropic"])
        payload["max_tokens"] = st.number_input("Max tokens", 64, 65536, 2048, step=64)
    elif action == Action.IMAGE.value:
        payload["image_prompt"] = st.text_area("Image prompt")
    elif action == Action.TRANSCRIBE.value:
        payload["audio_url"] = st.text_input("Audio URL")
    elif action == Action.SUMMARIZE_NEWS.value:
        payload["news_topic"] = st.text_input("Topic")
    elif action == Action.TRANSLATE.value:
        payload["text_to_translate"] = st.text_area("Text")
        payload["target_language"] = st.selectbox("Target language", SUPPORTED_LANGUAGES)
    elif action == Action.TRANSLATE_DOCUMENT.value:
        payload["text"] = st.text_area("Document", height=250)
        payload["targetLanguage"] = st.selectbox("Target language", SUPPORTED_LANGUAGES)
        payload["preserveFormatting"] = st.checkbox("Preserve formatting", value=True)
    elif action == Action.CLASSIFY.value:
        payload["text_to_classify"] = st.text_area("Text")
        payload["labels"] = [x.strip() for x in st.text_input("Labels (comma-separated)").split(",") if x.strip()]
    elif action == Action.EMBEDDINGS.value:
        payload["text_for_embeddings"] = st.text_area("Text")
    elif action == Action.SENTIMENT.value:
        payload["text_for_sentiment"] = st.text_area("Text")
    elif action in (Action.CORRECT_GRAMMAR.value, Action.GENERATE_SUMMARY.value):
        payload["text"] = st.text_area("Text", height=250)
    elif action == Action.GENERATE_DOCUMENT.value:
        payload["documentDescription"] = st.text_area("Description")
        payload["documentType"] = st.selectbox("Type", [d.value for d in DocumentType])
        payload["targetLanguage"] = st.selectbox("Language", SUPPORTED_LANGUAGES)
        payload["includeWebResearch"] = st.checkbox("Web research", value=True)
    elif action == Action.CORRECT_DOCUMENT.value:
        payload["text"] = st.text_area("Document", height=250)
        payload["documentType"] = st.text_input("Document type", "contract")
        payload["country"] = st.selectbox("Country", list(LEGAL_FRAMEWORKS))
        payload["language"] = st.selectbox("Language", SUPPORTED_LANGUAGES)
        payload["minimumCharacters"] = st.number_input("Minimum characters", 1000, 200000, 50000, step=1000)

    if st.button("Run", type="primary", key="hub_run"):
        result = run("Calling AI providers...", hub.dispatch, payload)
        if result:
            st.caption(f"Provider: {result.get('provider') or ', '.join(result.get('providers', []))}")
            if "image_base64" in result:
                st.image(base64.b64decode(result["image_base64"]))
            else:
                for key in ("content", "summary", "translated", "translatedText", "correctedText",
                            "generatedDocument", "correctedDocument", "text"):
                    if key in result:
                        st.markdown(result[key])
                        st.download_button("Download", result[key], file_name=f"{action}.md")
                        break
                else:
                    st.json({k: v for k, v in result.items() if k not in ("success", "cost_info")})

# ============================================================================
# TAB: Competitor Analysis
# ============================================================================

with tab_competitors:
    st.header("Competitor Analysis")
    analyst: CompetitorAnalyst = services["analyst"]
    urls = st.text_area("Competitor URLs (one per line)")
    if st.button("Collect pages") and urls.strip():
        collected = run("Collecting pages...", services["scraper"].collect,
                        [u for u in urls.splitlines() if u.strip()])
        if collected:
            stats = collected["stats"]
            st.caption(f"{stats['success']}/{stats['total']} pages collected")
            for item in collected["results"]:
                if not item["success"]:
                    st.warning(f"{item['url']}: {item['error']}")
            st.session_state["scraped"] = collected["texto_completo"]
    scraped = st.text_area("Scraped site content", value=st.session_state.get("scraped", ""), height=250)
    custom_prompt = st.text_area("Custom prompt (optional)")
    fast = st.checkbox("Fast mode", value=False)
    engine = st.radio("Engine", ["Gemini", "Groq", "Claude"], horizontal=True)

    if st.button("Analyze", type="primary"):
        fn = {
            "Gemini": analyst.analyze_with_gemini,
            "Groq": analyst.analyze_with_groq,
            "Claude": analyst.analyze_with_claude,
        }[engine]
        result = run(f"Analyzing with {engine}...", fn, scraped, custom_prompt or None, fast)
        if result:
            st.session_state["last_insights"] = result.get("insights") or result.get("insights_claude")
            st.caption(f"{result.get('model')} · {result.get('elapsed_ms')} ms")
            if result.get("insights_parsed"):
                st.json(result["insights_parsed"])
            else:
                st.markdown(st.session_state["last_insights"])

    if st.session_state.get("last_insights"):
        st.subheader("Complement")
        additional = st.text_area("Additional text (optional)")
        if st.button("Complement with Gemini"):
            result = run("Complementing...", analyst.complement_with_gemini,
                         st.session_state["last_insights"], None, fast, additional)
            if result:
                st.caption(f"{result['provider']} · {result['model']}")
                st.markdown(result["complemento_gemini"])

# ============================================================================
# TAB: Leads
# ============================================================================

with tab_leads:
    st.header("Lead Triage")
    crud: SupabaseCRUD | None = services["crud"]
    analyzer = LeadAnalyzer(hub, crud)

    if crud is None:
        st.info("Supabase is not configured; paste a lead below to analyze it.")
        message = st.text_area("Lead message")
        if st.button("Analyze lead") and message:
            assessment = run("Analyzing...", analyzer.analyze, Lead(id="manual", type="contact", message=message))
            if assessment:
                st.json(assessment.to_dict())
    else:
        table = st.selectbox("Source", ["contacts", "marketplace_registrations"])
        lead_type = "marketplace" if table == "marketplace_registrations" else "contact"
        resp = crud.fetch_rows(table, select="id, message, priority", limit=50, order_by="created_at", desc=True)
        if not resp.ok:
            st.error(resp.error)
        else:
            leads = [Lead(id=str(r["id"]), type=lead_type, message=r.get("message"))
                     for r in resp.data or [] if r.get("message") and len(r["message"]) > 10]
            st.caption(f"{len(leads)} leads with a message")
            apply = st.checkbox("Write suggested priority back", value=True)
            if st.button("Analyze batch", type="primary"):
                results = run("Analyzing leads...", analyzer.analyze_batch, leads, apply)
                if results:
                    st.success(f"{len(results)} leads analisados com IA!")
                    st.dataframe(pd.DataFrame([r.to_dict() for r in results]),
                                 use_container_width=True, hide_index=True)

# ============================================================================
# TAB: Semantic Search
# ============================================================================

with tab_search:
    st.header("Semantic Search")
    query = st.text_input("Query")
    raw_docs = st.text_area("Documents (one per paragraph)", height=250)
    if st.button("Search", type="primary") and query:
        documents = [{"id": str(i), "content": d.strip()} for i, d in enumerate(raw_docs.split("\n\n")) if d.strip()]
        hits = run("Gerando embeddings e calculando similaridade...", SemanticSearch(hub).search, query, documents)
        if hits:
            st.caption(f"{sum(1 for h in hits if h.similarity >= 0.5)} resultados relevantes")
            for hit in hits:
                st.markdown(f"**{hit.similarity * 100:.0f}%** · {relevance_label(hit.similarity)}")
                st.text(hit.content[:300])

# ============================================================================
# TAB: E-mail
# ============================================================================

with tab_email:
    st.header("E-mail")
    emails: EmailService = services["emails"]
    reply_tab, signer_tab, confirm_tab = st.tabs(["Reply", "Next signer", "Signature confirmation"])

    with reply_tab:
        to = st.text_input("To")
        to_name = st.text_input("Name")
        reply_type = st.selectbox("Type", [r.value for r in ReplyType])
        subject = st.text_input("Subject")
        body = st.text_area("Message")
        if st.button("Send reply", type="primary") and to:
            sent = run("Sending...", emails.send_reply_email, {
                "to": to, "toName": to_name, "replyType": reply_type,
                "subject": subject, "message": body,
            })
            if sent:
                st.success("E-mail sent")

    with signer_tab:
        document_id = st.text_input("Document ID")
        if st.button("Notify next signer") and document_id:
            sent = run("Notifying...", emails.notify_next_signer, {"documentId": document_id})
            if sent:
                st.success(sent.get("message") or "Notification sent")

    with confirm_tab:
        signer_email = st.text_input("Signer e-mail")
        signer_name = st.text_input("Signer name")
        signed_document = st.text_input("Document name")
        confirm_language = st.selectbox("Language", SUPPORTED_LANGUAGES, key="confirm_language")
        if st.button("Send confirmation") and signer_email:
            sent = run("Sending...", emails.send_signature_confirmation, {
                "signerEmail": signer_email, "signerName": signer_name,
                "documentName": signed_document, "language": confirm_language,
            })
            if sent:
                st.success("Confirmation sent")

# ============================================================================
# TAB: Analytics
# ============================================================================

with tab_analytics:
    st.header("Usage Analytics")
    analytics = hub.analytics
    summary = analytics.get_summary()

    if analytics.total_calls == 0:
        st.info("Run some hub actions to see analytics.")
    else:
        kpi1, kpi2, kpi3, kpi4 = st.columns(4)
        kpi1.metric("Total Calls", summary["total_calls"])
        kpi2.metric("Free Calls", summary["free_calls"])
        kpi3.metric("Paid Calls", summary["paid_calls"])
        kpi4.metric("Errors", summary["errors"])

        st.divider()
        chart_col1, chart_col2 = st.columns(2)

        with chart_col1:
            st.subheader("Provider Usage")
            df = pd.DataFrame([
                {"Provider": p, "Calls": s["count"], "Avg Time (s)": s["avg_time_s"]}
                for p, s in summary["providers"].items()
            ])
            st.dataframe(df, use_container_width=True, hide_index=True)
            fig = px.pie(df, values="Calls", names="Provider", title="Calls by Provider", hole=0.4)
            fig.update_layout(height=300, margin=dict(t=40, b=20, l=20, r=20))
            st.plotly_chart(fig, use_container_width=True)

        with chart_col2:
            st.subheader("Actions")
            action_df = pd.DataFrame(list(summary["actions"].items()), columns=["Action", "Calls"])
            fig = px.bar(action_df, x="Action", y="Calls", title="Calls per Action")
            fig.update_layout(height=300, margin=dict(t=40, b=20, l=20, r=20))
            st.plotly_chart(fig, use_container_width=True)

        log_df = pd.DataFrame(analytics.to_dataframe_records())
        if not log_df.empty:
            st.subheader("Call Timeline")
            fig = px.scatter(
                log_df, x=log_df.index, y="time_s", color="provider",
                hover_data=["action"], title="Response Time per Call",
                labels={"index": "Call #", "time_s": "Time (s)"},
            )
            fig.update_layout(height=350, margin=dict(t=40, b=20, l=20, r=20))
            st.plotly_chart(fig, use_container_width=True)

        st.divider()
        st.download_button(
            "Export Analytics (JSON)",
            data=json.dumps(summary, indent=2),
            file_name="analytics.json",
            mime="application/json",
        )
