"""
JavaScript injected into the meeting page to run the media capture.

The recorder captures the current tab with getDisplayMedia, slices it with
MediaRecorder and ships every slice to the host through the exposed
``submitChunk`` function. It also keeps an analyser on the audio track so
the host-side silence watchdog can sample the audio level.
"""

# =============================================================================
# RECORDER
# =============================================================================

START_RECORDER_JS = """
async ({ secret, chunkInterval, primaryMimeType, secondaryMimeType }) => {
    if (window.__meetbotRecorder) {
        return {
            started: true,
            hasAudio: window.__meetbotRecorder.hasAudio,
            mimeType: window.__meetbotRecorder.mimeType,
        };
    }

    if (!navigator.mediaDevices || !navigator.mediaDevices.getDisplayMedia) {
        return { started: false, error: 'MediaDevices or getDisplayMedia not supported in this browser.' };
    }

    let stream;
    try {
        stream = await navigator.mediaDevices.getDisplayMedia({
            video: true,
            audio: {
                autoGainControl: false,
                channels: 2,
                channelCount: 2,
                echoCancellation: false,
                noiseSuppression: false,
            },
            preferCurrentTab: true,
        });
    } catch (error) {
        return { started: false, error: String((error && error.message) || error) };
    }

    const audioTracks = stream.getAudioTracks();
    if (audioTracks.length === 0) {
        console.warn('No audio tracks available for silence detection. Will rely only on presence detection.');
    }

    let mimeType = primaryMimeType;
    if (!MediaRecorder.isTypeSupported(primaryMimeType)) {
        console.warn(`Media Recorder did not find primary mime type ${primaryMimeType}, using fallback ${secondaryMimeType}`);
        mimeType = secondaryMimeType;
    }

    const mediaRecorder = new MediaRecorder(stream, { mimeType });
    const pending = new Set();

    const toBase64 = (buffer) => {
        const bytes = new Uint8Array(buffer);
        const step = 0x8000;
        let binary = '';
        for (let i = 0; i < bytes.length; i += step) {
            binary += String.fromCharCode.apply(null, bytes.subarray(i, i + step));
        }
        return btoa(binary);
    };

    mediaRecorder.ondataavailable = (event) => {
        if (!event.data || !event.data.size) {
            console.warn('Received empty chunk...');
            return;
        }
        const send = event.data.arrayBuffer()
            .then((buffer) => window.submitChunk(secret, toBase64(buffer)))
            .catch((error) => console.error('Error uploading chunk:', error))
            .finally(() => pending.delete(send));
        pending.add(send);
    };

    let audioContext = null;
    let analyser = null;
    let dataArray = null;
    if (audioTracks.length > 0) {
        try {
            audioContext = new AudioContext();
            const mediaSource = audioContext.createMediaStreamSource(stream);
            analyser = audioContext.createAnalyser();
            // Small FFT: cheap to sample every 100ms
            analyser.fftSize = 256;
            mediaSource.connect(analyser);
            dataArray = new Uint8Array(analyser.frequencyBinCount);
        } catch (error) {
            console.error('Failed to initialize silence detection:', error);
            analyser = null;
        }
    }

    let stopped = false;
    const recorder = {
        hasAudio: analyser !== null,
        mimeType,
        audioLevel() {
            if (!analyser) {
                return null;
            }
            analyser.getByteFrequencyData(dataArray);
            return dataArray.reduce((a, b) => a + b, 0) / dataArray.length;
        },
        async stop() {
            if (stopped) {
                return;
            }
            stopped = true;
            if (mediaRecorder.state !== 'inactive') {
                const finished = new Promise((resolve) => {
                    mediaRecorder.addEventListener('stop', resolve, { once: true });
                });
                mediaRecorder.stop();
                await finished;
            }
            stream.getTracks().forEach((track) => track.stop());
            if (audioContext) {
                await audioContext.close().catch(() => {});
            }
            await Promise.allSettled(Array.from(pending));
        },
    };

    // Capture ended from outside (tab closed, sharing revoked)
    stream.getVideoTracks().forEach((track) => {
        track.addEventListener('ended', () => {
            if (!stopped) {
                window.signalSessionEnd(secret);
            }
        });
    });

    mediaRecorder.start(chunkInterval);
    window.__meetbotRecorder = recorder;
    console.log(`Media Recorder started with ${mimeType}, ${chunkInterval}ms chunks`);

    return { started: true, hasAudio: recorder.hasAudio, mimeType };
}
"""

HAS_AUDIO_JS = "() => !!(window.__meetbotRecorder && window.__meetbotRecorder.hasAudio)"

AUDIO_LEVEL_JS = "() => (window.__meetbotRecorder ? window.__meetbotRecorder.audioLevel() : null)"

STOP_RECORDER_JS = """
async () => {
    if (window.__meetbotRecorder) {
        await window.__meetbotRecorder.stop();
    }
}
"""
