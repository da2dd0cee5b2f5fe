"""
Scripts evaluated inside the page.

Both return plain JSON-serialisable values; everything derived from them
is computed in page_parser so the browser side stays a single DOM walk.
"""

EXTRACT_PAGE_DATA_JS = """() => {
    const data = {
        location: window.location.href,
        title: document.title || '',
        lang: document.documentElement.lang || '',
        charset: document.characterSet || 'UTF-8',
        metas: [],
        canonicalHref: '',
        hasViewport: !!document.querySelector('meta[name="viewport"]'),
        hasFavicon: !!document.querySelector('link[rel*="icon"]'),
        headings: {h1: [], h2: [], h3: [], h4: [], h5: [], h6: []},
        images: [],
        links: [],
        schemaScripts: [],
        textContent: document.body ? document.body.innerText : '',
        paragraphCount: document.querySelectorAll('p').length,
    };

    document.querySelectorAll('meta').forEach(meta => {
        const name = meta.getAttribute('name') || meta.getAttribute('property') || meta.getAttribute('http-equiv');
        const content = meta.getAttribute('content');
        if (name && content) {
            data.metas.push([name, content]);
        }
    });

    const canonical = document.querySelector('link[rel="canonical"]');
    if (canonical) {
        data.canonicalHref = canonical.href || canonical.getAttribute('href') || '';
    }

    Object.keys(data.headings).forEach(tag => {
        document.querySelectorAll(tag).forEach(el => {
            data.headings[tag].push({
                text: (el.innerText || '').trim(),
                position: data.headings[tag].length + 1,
            });
        });
    });

    document.querySelectorAll('img').forEach((img, index) => {
        data.images.push({
            src: img.src || '',
            alt: img.getAttribute('alt') || '',
            title: img.title || '',
            width: img.width || null,
            height: img.height || null,
            loading: img.loading || '',
            position: index + 1,
        });
    });

    document.querySelectorAll('a[href]').forEach((a, index) => {
        data.links.push({
            href: a.href || a.getAttribute('href') || '',
            text: (a.innerText || '').trim(),
            title: a.title || '',
            rel: a.getAttribute('rel') || '',
            target: a.target || '',
            position: index + 1,
        });
    });

    document.querySelectorAll('script[type="application/ld+json"]').forEach(script => {
        data.schemaScripts.push(script.textContent || '');
    });

    return data;
}"""

CORE_WEB_VITALS_JS = """() => new Promise(resolve => {
    const vitals = {lcp: null, fid: null, cls: null, fcp: null, ttfb: null};
    const timeout = setTimeout(() => resolve(vitals), 3000);
    try {
        const nav = performance.getEntriesByType('navigation')[0];
        if (nav) {
            vitals.ttfb = Math.round(nav.responseStart - nav.requestStart);
        }
        const paint = performance.getEntriesByType('paint')
            .find(entry => entry.name === 'first-contentful-paint');
        if (paint) {
            vitals.fcp = Math.round(paint.startTime);
        }
        if (!('PerformanceObserver' in window)) {
            clearTimeout(timeout);
            resolve(vitals);
            return;
        }
        let pending = 3;
        const done = () => {
            pending -= 1;
            if (pending === 0) {
                clearTimeout(timeout);
                resolve(vitals);
            }
        };
        new PerformanceObserver(list => {
            const entries = list.getEntries();
            const last = entries[entries.length - 1];
            if (last) {
                vitals.lcp = Math.round(last.startTime);
            }
            done();
        }).observe({type: 'largest-contentful-paint', buffered: true});
        new PerformanceObserver(list => {
            const first = list.getEntries()[0];
            if (first) {
                vitals.fid = Math.round(first.processingStart - first.startTime);
            }
            done();
        }).observe({type: 'first-input', buffered: true});
        let cls = 0;
        new PerformanceObserver(list => {
            for (const entry of list.getEntries()) {
                if (!entry.hadRecentInput) {
                    cls += entry.value;
                }
            }
            vitals.cls = Math.round(cls * 1000) / 1000;
            done();
        }).observe({type: 'layout-shift', buffered: true});
    } catch (e) {
        clearTimeout(timeout);
        resolve(vitals);
    }
})"""
