"""
Local machine translation provider using an NLLB/M2M100 seq2seq model.
"""
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from ..errors import ProviderInitError
from ..models import TranslationResult, TranslatorCode
from .base import Translator

console = Console()


class NLLBTranslator(Translator):
    """Runs a Hugging Face translation model in-process, in batches"""

    code = TranslatorCode.NLLB
    batch = True

    def __init__(
        self,
        model_name: str = "facebook/nllb-200-distilled-600M",
        device: str = "cuda",
        source_lang: Optional[str] = "jpn_Jpan",
        target_lang: Optional[str] = "eng_Latn",
        batch_size: int = 8,
        max_length: int = 200,
        beam_size: int = 5,
    ):
        """Initialize the translation engine

        Args:
            model_name: Name or path of the translation model to use
            device: Device to run on ("cuda" or "cpu")
            source_lang: Source language code in the model's own scheme
            target_lang: Target language code in the model's own scheme
            batch_size: Batch size for translation
            max_length: Maximum output sequence length
            beam_size: Beam size for decoding
        """
        super().__init__(source_lang=source_lang, target_lang=target_lang)
        self.model_name = model_name
        self.device = device
        self.batch_size = batch_size
        self.max_length = max_length
        self.beam_size = beam_size

        # Loaded by initialize()
        self._torch = None
        self._model = None
        self._tokenizer = None

    def _initialize(self) -> None:
        """Load the model and tokenizer"""
        try:
            # Optional dependency: pip install "subtl[nllb]"
            import torch
            from transformers import AutoModelForSeq2SeqLM, AutoTokenizer
        except ImportError as e:
            raise ProviderInitError(
                "Cannot load translation model: torch or transformers not installed.",
                hint='Install optional dependencies with: pip install "subtl[nllb]"',
            ) from e

        try:
            console.print(f"Loading translation model: {self.model_name}")
            self._tokenizer = AutoTokenizer.from_pretrained(self.model_name, src_lang=self.source_lang)
            model = AutoModelForSeq2SeqLM.from_pretrained(self.model_name)
        except Exception as e:
            raise ProviderInitError(
                f"Failed to load translation model: {e}",
                hint="Check NLLB_MODEL and your network connection",
            ) from e

        # Move to appropriate device
        if self.device == "cuda" and torch.cuda.is_available():
            model = model.half().to("cuda")
        else:
            if self.device == "cuda":
                console.print("[yellow]CUDA requested but not available. Using CPU instead.[/yellow]")
            self.device = "cpu"
            model = model.to("cpu")

        self._check_language(self.source_lang, "source")
        self._check_language(self.target_lang, "target")
        self._torch = torch
        self._model = model

    def _check_language(self, lang: Optional[str], kind: str) -> None:
        if lang and self._tokenizer.convert_tokens_to_ids(lang) == self._tokenizer.unk_token_id:
            raise ProviderInitError(
                f"Invalid {kind} language \"{lang}\" for {self.model_name}",
                hint="Use the model's language codes, e.g. jpn_Jpan or eng_Latn",
            )

    def _translate(self, lines: List[str]) -> List[TranslationResult]:
        results: List[TranslationResult] = []
        forced_bos_token_id = None
        if self.target_lang:
            forced_bos_token_id = self._tokenizer.convert_tokens_to_ids(self.target_lang)

        batches = [lines[i:i + self.batch_size] for i in range(0, len(lines), self.batch_size)]
        for batch in batches:
            try:
                inputs = self._tokenizer(batch, return_tensors="pt", padding=True, truncation=True)
                inputs = {k: v.to(self.device) for k, v in inputs.items()}
                with self._torch.no_grad():
                    outputs = self._model.generate(
                        **inputs,
                        forced_bos_token_id=forced_bos_token_id,
                        max_length=self.max_length,
                        num_beams=self.beam_size,
                        early_stopping=True,
                    )
                translations = self._tokenizer.batch_decode(outputs, skip_special_tokens=True)
            except Exception as e:
                console.print(f"[red]Translation failed: {escape(str(e))}[/red]")
                translations = [""] * len(batch)

            results.extend(
                TranslationResult(text=text.strip(), translator=self.code)
                for text in translations
            )
        return results
